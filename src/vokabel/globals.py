from .ingest import DatasetLoader
from .sessions import SessionStore

session_store = SessionStore()
dataset_loader = DatasetLoader()
