import motor.motor_asyncio
from pymongo import ASCENDING, DESCENDING

from careerprep.models.settings import get_settings
from careerprep.utils.logging_config import get_logger

logger = get_logger(__name__)

_database = get_settings().database

logger.info(f"Initializing MongoDB connection to database: {_database.db_name}")

# motor connects lazily, so this never blocks import
client = motor.motor_asyncio.AsyncIOMotorClient(_database.mongo_details)
db = client[_database.db_name]

# Collections
analyses_coll = db["analyses"]
ratings_coll = db["swot_ratings"]
interviews_coll = db["interviews"]


async def _create_index(coll, keys, **kwargs):
    label = f"{coll.name}.({', '.join(k for k, _ in keys)})"
    try:
        await coll.create_index(keys, **kwargs)
        logger.debug(f"Created index on {label}")
    except Exception as e:
        if "already exists" in str(e).lower():
            logger.debug(f"Index on {label} already exists")
        else:
            logger.warning(f"Could not create index on {label}: {e}")


async def init_indexes():
    """Index initialization for collections."""
    logger.info("Starting database index initialization")

    # one analysis and one rating document per (user, resume)
    await _create_index(analyses_coll, [("user_id", ASCENDING), ("resume_hash", ASCENDING)], unique=True)
    await _create_index(analyses_coll, [("user_id", ASCENDING), ("updated_at", DESCENDING)])
    await _create_index(ratings_coll, [("user_id", ASCENDING), ("resume_hash", ASCENDING)], unique=True)
    await _create_index(interviews_coll, [("user_id", ASCENDING), ("created_at", DESCENDING)])

    logger.info("Database index initialization completed")


def to_dict(doc):
    if not doc:
        return None
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return doc
