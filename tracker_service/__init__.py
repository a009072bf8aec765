"""Package marker for the job-application tracker service.

Run with `python -m tracker_service` or
`uvicorn tracker_service.app:create_app --factory`.
"""

__version__ = "1.0.0"
