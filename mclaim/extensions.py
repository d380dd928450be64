from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

RECORD_STORE_KEY = "mclaim.record_store"
GENERATIVE_LOOKUP_KEY = "mclaim.generative_lookup"
PENDING_RESOLUTIONS_KEY = "mclaim.pending_resolutions"
