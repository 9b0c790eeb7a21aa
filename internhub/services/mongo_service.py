"""
MongoDB Service - document operations the portal relies on.

Collections in this database:
1. users         - students (with skills) and professors
2. projects      - supervised projects, with applicant / intern id sets
3. applications  - one document per (student, project) submission

Every state change goes through a single conditional write:
- status transitions filter on the expected prior status (compare-and-set)
- set membership uses $addToSet / $pullAll (never fetch, mutate, save)
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database

from internhub.core.errors import NotFoundError
from internhub.db.mongodb import get_collection, COLLECTIONS
from internhub.models import (
    Application,
    ApplicationStatus,
    Project,
    ProjectStatus,
    User,
    UserRole,
)


# ============================================================
# HELPER: ids arrive as strings from callers
# ============================================================

def to_object_id(value: str, kind: str = "Document") -> ObjectId:
    """Parse a string id. A malformed id cannot exist, so it is not-found."""
    # ObjectId(None) would mint a fresh id
    if not isinstance(value, str):
        raise NotFoundError(f"{kind} not found")
    try:
        return ObjectId(value)
    except InvalidId:
        raise NotFoundError(f"{kind} not found")


def _object_ids(values: Iterable[str]) -> List[ObjectId]:
    return [ObjectId(v) for v in values if ObjectId.is_valid(v)]


# ============================================================
# USERS COLLECTION
# ============================================================

class UserService:
    """Students and professors. Registration itself lives elsewhere."""

    def __init__(self, db: Database = None):
        self.collection: Collection = get_collection(COLLECTIONS["users"], db)

    def insert(
        self,
        name: str,
        email: str,
        role: UserRole,
        department: str = None,
        skills: List[str] = None,
    ) -> User:
        doc = {
            "name": name,
            "email": email,
            "role": UserRole(role).value,
            "department": department,
            "skills": list(skills or []),
            "created_at": datetime.utcnow(),
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return User.from_doc(doc)

    def get_by_id(self, user_id: str) -> Optional[User]:
        doc = self.collection.find_one({"_id": to_object_id(user_id, "User")})
        return User.from_doc(doc) if doc else None

    def get_many(self, user_ids: Iterable[str]) -> Dict[str, User]:
        """Fetch several users at once, keyed by id."""
        cursor = self.collection.find({"_id": {"$in": _object_ids(user_ids)}})
        users = [User.from_doc(doc) for doc in cursor]
        return {u.id: u for u in users}


# ============================================================
# PROJECTS COLLECTION
# ============================================================

class ProjectService:
    """
    Project documents.

    `applicants` / `current_interns` are only ever changed through
    update_sets(), add_applicant_if_eligible(), add_applicant_unless_intern()
    and replace_sets().
    """

    def __init__(self, db: Database = None):
        self.collection: Collection = get_collection(COLLECTIONS["projects"], db)

    def insert(self, fields: dict) -> Project:
        doc = dict(fields)
        doc.setdefault("status", ProjectStatus.open.value)
        doc["current_interns"] = []
        doc["applicants"] = []
        doc["created_at"] = datetime.utcnow()
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return Project.from_doc(doc)

    def get_by_id(self, project_id: str) -> Optional[Project]:
        doc = self.collection.find_one({"_id": to_object_id(project_id, "Project")})
        return Project.from_doc(doc) if doc else None

    def find(self, query: dict = None, skip: int = 0, limit: int = 0) -> List[Project]:
        """Newest first."""
        cursor = self.collection.find(query or {}).sort(
            [("created_at", DESCENDING), ("_id", DESCENDING)]
        )
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return [Project.from_doc(doc) for doc in cursor]

    def count(self, query: dict = None) -> int:
        return self.collection.count_documents(query or {})

    def count_by(self, field: str, unwind: bool = False, limit: int = 0) -> List[Tuple[str, int]]:
        """
        (value, count) pairs for `field`, most frequent first, ties by value.
        `unwind` counts the elements of an array field.
        """
        pipeline: List[dict] = []
        if unwind:
            pipeline.append({"$unwind": f"${field}"})
        pipeline += [
            {"$group": {"_id": f"${field}", "count": {"$sum": 1}}},
            {"$sort": {"count": DESCENDING, "_id": ASCENDING}},
        ]
        if limit:
            pipeline.append({"$limit": limit})
        return [(doc["_id"], doc["count"]) for doc in self.collection.aggregate(pipeline)]

    def find_by_supervisor(self, supervisor_id: str) -> List[Project]:
        return self.find({"supervisor_id": supervisor_id})

    def find_open(self) -> List[Project]:
        return self.find({"status": ProjectStatus.open.value})

    def update_fields(self, project_id: str, fields: dict) -> Optional[Project]:
        doc = self.collection.find_one_and_update(
            {"_id": to_object_id(project_id, "Project")},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return Project.from_doc(doc) if doc else None

    def delete(self, project_id: str) -> bool:
        result = self.collection.delete_one({"_id": to_object_id(project_id, "Project")})
        return result.deleted_count > 0

    def update_sets(
        self,
        project_id: str,
        add_applicants: Iterable[str] = (),
        remove_applicants: Iterable[str] = (),
        add_interns: Iterable[str] = (),
        remove_interns: Iterable[str] = (),
    ) -> Optional[Project]:
        """
        Apply set-union / set-difference to the membership arrays in one
        atomic write. A field may not be both added to and removed from.
        Returns None when the project does not exist.
        """
        update: dict = {}
        for op, field, values in (
            ("$addToSet", "applicants", add_applicants),
            ("$addToSet", "current_interns", add_interns),
            ("$pullAll", "applicants", remove_applicants),
            ("$pullAll", "current_interns", remove_interns),
        ):
            values = list(values)
            if not values:
                continue
            value = {"$each": values} if op == "$addToSet" else values
            update.setdefault(op, {})[field] = value

        if not update:
            return self.get_by_id(project_id)

        doc = self.collection.find_one_and_update(
            {"_id": to_object_id(project_id, "Project")},
            update,
            return_document=ReturnDocument.AFTER,
        )
        return Project.from_doc(doc) if doc else None

    def add_applicant_if_eligible(self, project_id: str, student_id: str) -> Optional[Project]:
        """
        Add `student_id` to applicants only if the project is open and the
        student is neither an applicant nor an intern yet. None otherwise.
        """
        doc = self.collection.find_one_and_update(
            {
                "_id": to_object_id(project_id, "Project"),
                "status": ProjectStatus.open.value,
                "applicants": {"$nin": [student_id]},
                "current_interns": {"$nin": [student_id]},
            },
            {"$addToSet": {"applicants": student_id}},
            return_document=ReturnDocument.AFTER,
        )
        return Project.from_doc(doc) if doc else None

    def add_applicant_unless_intern(self, project_id: str, student_id: str) -> Optional[Project]:
        """
        Add `student_id` to applicants unless it is already an intern, in
        the same write. None when the project is missing or the student is
        an intern by the time the write lands.
        """
        doc = self.collection.find_one_and_update(
            {
                "_id": to_object_id(project_id, "Project"),
                "current_interns": {"$nin": [student_id]},
            },
            {"$addToSet": {"applicants": student_id}},
            return_document=ReturnDocument.AFTER,
        )
        return Project.from_doc(doc) if doc else None

    def replace_sets(
        self, project_id: str, applicants: List[str], interns: List[str]
    ) -> Optional[Project]:
        doc = self.collection.find_one_and_update(
            {"_id": to_object_id(project_id, "Project")},
            {"$set": {"applicants": applicants, "current_interns": interns}},
            return_document=ReturnDocument.AFTER,
        )
        return Project.from_doc(doc) if doc else None


# ============================================================
# APPLICATIONS COLLECTION
# ============================================================

class ApplicationService:
    """Application documents. Status writes are conditional on prior status."""

    def __init__(self, db: Database = None):
        self.collection: Collection = get_collection(COLLECTIONS["applications"], db)

    def insert(
        self,
        student_id: str,
        project_id: str,
        cover_letter: str,
        documents: List[str] = None,
    ) -> Application:
        """
        Insert a pending application. Raises pymongo DuplicateKeyError when
        the pending-pair unique index already holds this pair.
        """
        doc = {
            "student_id": student_id,
            "project_id": project_id,
            "cover_letter": cover_letter,
            "documents": list(documents or []),
            "status": ApplicationStatus.pending.value,
            "applied_date": datetime.utcnow(),
            "reviewed_by": None,
            "review_date": None,
        }
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return Application.from_doc(doc)

    def get_by_id(self, application_id: str) -> Optional[Application]:
        doc = self.collection.find_one({"_id": to_object_id(application_id, "Application")})
        return Application.from_doc(doc) if doc else None

    def find_pending(self, student_id: str, project_id: str) -> Optional[Application]:
        doc = self.collection.find_one({
            "student_id": student_id,
            "project_id": project_id,
            "status": ApplicationStatus.pending.value,
        })
        return Application.from_doc(doc) if doc else None

    def _find(self, query: dict, oldest_first: bool) -> List[Application]:
        direction = ASCENDING if oldest_first else DESCENDING
        cursor = self.collection.find(query).sort(
            [("applied_date", direction), ("_id", direction)]
        )
        return [Application.from_doc(doc) for doc in cursor]

    def find_by_projects(
        self,
        project_ids: Iterable[str],
        status: ApplicationStatus = None,
        oldest_first: bool = False,
    ) -> List[Application]:
        query: dict = {"project_id": {"$in": list(project_ids)}}
        if status is not None:
            query["status"] = ApplicationStatus(status).value
        return self._find(query, oldest_first)

    def find_by_student(self, student_id: str) -> List[Application]:
        """Newest first."""
        return self._find({"student_id": student_id}, oldest_first=False)

    def update_if_status(
        self, application_id: str, expected: ApplicationStatus, fields: dict
    ) -> Optional[Application]:
        """
        Compare-and-set: write `fields` only while the stored status still
        equals `expected`. None means the condition failed (or no document).
        """
        doc = self.collection.find_one_and_update(
            {
                "_id": to_object_id(application_id, "Application"),
                "status": ApplicationStatus(expected).value,
            },
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return Application.from_doc(doc) if doc else None

    def delete_if_status(self, application_id: str, expected: ApplicationStatus) -> bool:
        result = self.collection.delete_one({
            "_id": to_object_id(application_id, "Application"),
            "status": ApplicationStatus(expected).value,
        })
        return result.deleted_count > 0

    def count_by_status(self, query: dict) -> Dict[str, int]:
        counts = {s.value: 0 for s in ApplicationStatus}
        for doc in self.collection.find(query, {"status": 1}):
            counts[doc["status"]] = counts.get(doc["status"], 0) + 1
        return counts

    def student_ids_with_status(self, project_id: str, status: ApplicationStatus) -> List[str]:
        """Distinct student ids in application order."""
        ids: List[str] = []
        for app in self.find_by_projects([project_id], status=status, oldest_first=True):
            if app.student_id not in ids:
                ids.append(app.student_id)
        return ids


# ============================================================
# CONVENIENCE: all collections behind one object
# ============================================================

class MongoStore:
    """
    The persistence collaborator handed to every service.

    Usage:
        store = get_mongo_services()
        store.projects.get_by_id(...)
    """

    def __init__(self, db: Database = None):
        self.users = UserService(db)
        self.projects = ProjectService(db)
        self.applications = ApplicationService(db)


def get_mongo_services(db: Database = None) -> MongoStore:
    return MongoStore(db)
