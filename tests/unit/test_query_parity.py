"""
Backend parity for the job listing query.

The same user documents are loaded into the in-memory store and into a
mongomock-backed MongoUserRepository (which executes the real aggregation
pipeline). Every query must produce identical pages on both.
"""

import pytest

from tracker_service.job_query import JobQuery

QUERY_PARAMS = [
    {},
    {"sort": "oldest"},
    {"company": "Acme"},
    {"company": "Acme,Beta", "sort": "oldest"},
    {"position": "Engineer,Analyst"},
    {"stage": "Applied,Offer"},
    {"stage": "Nobody"},
    {"date_from": "2024-02-01"},
    {"date_to": "2024-03-01"},
    {"date_from": "2024-03-01", "date_to": "2024-03-31"},
    {"date_from": "2024-03-31T19:00:00"},
    {"q": "engineer"},
    {"q": "ENG", "sort": "oldest"},
    {"q": "interview"},
    {"q": "(eu)"},
    {"q": "acme", "company": "Acme", "date_to": "2024-02-01"},
    {"page": "2", "page_size": "2"},
    {"page": "3", "page_size": "2", "sort": "oldest"},
    {"page": "9", "page_size": "2"},
    {"company": "Acme", "page": "2", "page_size": "1"},
    {"page_size": "100"},
    {"page": str(2 ** 62), "page_size": "2"},
]


@pytest.fixture
def backends(memory_repository, mongo_repository, seed, seeded_user, other_user):
    seed(memory_repository, seeded_user, other_user)
    seed(mongo_repository, seeded_user, other_user)
    return memory_repository, mongo_repository


@pytest.mark.parametrize("params", QUERY_PARAMS, ids=lambda p: ",".join(f"{k}={v}" for k, v in p.items()) or "none")
def test_backends_return_identical_pages(backends, seeded_user, params):
    memory, mongo = backends
    query = JobQuery.from_params(**params)

    memory_page = memory.query_jobs(seeded_user["_id"], query)
    mongo_page = mongo.query_jobs(seeded_user["_id"], query)

    assert memory_page.total == mongo_page.total
    assert memory_page.jobs == mongo_page.jobs


def test_user_without_jobs(backends):
    memory, mongo = backends
    for repo in (memory, mongo):
        user_id = repo.insert_one({"username": "carol", "jobs": []}).upserted_id
        page = repo.query_jobs(user_id, JobQuery())
        assert (page.jobs, page.total) == ([], 0)
