"""
MongoDB Connection Utility

MongoDB stores every entity of the portal:
- users: students and professors (students carry skills)
- projects: supervised internship projects with applicant / intern sets
- applications: one document per (student, project) submission

WHY a document store?
- Applicant / intern membership maps onto array fields with atomic
  $addToSet / $pull, so no read-modify-write on a fetched document
- Conditional updates (filter on status) give compare-and-set transitions
"""
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from internhub.core.config import get_settings
from internhub.utils.logging import get_logger

logger = get_logger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(get_settings().mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the portal database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[get_settings().mongodb_db]
    return _db


def get_collection(name: str, db: Database = None) -> Collection:
    """Get a specific collection, from `db` when given (tests pass their own)."""
    if db is None:
        db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except PyMongoError as e:
        logger.error("mongodb_unreachable", error=str(e))
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "projects": "projects",
    "applications": "applications",
}


def init_mongo_indexes(db: Database = None):
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    if db is None:
        db = get_mongo_db()

    db[COLLECTIONS["users"]].create_index("email", unique=True)

    db[COLLECTIONS["projects"]].create_index("supervisor_id")
    db[COLLECTIONS["projects"]].create_index([("status", ASCENDING), ("created_at", ASCENDING)])

    apps = db[COLLECTIONS["applications"]]
    apps.create_index("student_id")
    apps.create_index([("project_id", ASCENDING), ("applied_date", ASCENDING)])

    # At most one pending application per (student, project) pair
    apps.create_index(
        [("student_id", ASCENDING), ("project_id", ASCENDING)],
        unique=True,
        partialFilterExpression={"status": "pending"},
        name="uniq_pending_application",
    )

    logger.info("mongodb_indexes_created")
