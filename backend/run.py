#!/usr/bin/env python3
# backend/run.py
"""
Development server runner.

Uses the in-memory store unless LESSONBOOK_STORAGE_BACKEND says otherwise,
so a local run never needs a database.
"""
import os
from pathlib import Path
import sys

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

os.environ.setdefault("LESSONBOOK_STORAGE_BACKEND", "memory")

import uvicorn  # noqa: E402

if __name__ == "__main__":
    print("Starting Lessonbook development server")
    print(f"Storage backend: {os.environ['LESSONBOOK_STORAGE_BACKEND']}")
    print("Access at: http://localhost:8000")
    print("API Docs: http://localhost:8000/docs")

    uvicorn.run("lessonbook.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
