# __init__.py
# Academic records API: users, professors, students and courses over Firestore

__version__ = "1.0.0"
