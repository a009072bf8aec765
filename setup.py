"""
Setup script for the job-tracker project.

Allows development installation with `pip install -e .`
Test dependencies: `pip install -e .[test]`
"""

from setuptools import setup, find_packages

setup(
    name="job-tracker",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"tracker_service": ["static/*.html", "static/scripts/*.js"]},
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "python-dotenv>=1.0",
        "pymongo>=4.6",
        "PyJWT>=2.8",
        "bcrypt>=4.1",
        "requests>=2.31",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-mock>=3.12",
            "httpx>=0.26",
            "mongomock>=4.1",
        ],
    },
)
