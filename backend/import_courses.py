"""
Seed and import the course catalog.

    python import_courses.py courses.csv

The CSV needs `name` and `location` columns; `description`, `image_url`,
`price_range` and `rating` are optional. Courses already present (same name
and location) are skipped.
"""
import logging
import sys

import pandas as pd
from sqlmodel import Session

from database import engine, create_db_and_tables
from models import Course
from storage import Storage, SQLStorage

logger = logging.getLogger(__name__)

DEFAULT_COURSES = [
    {
        "name": "Pebble Beach Golf Links",
        "location": "Pebble Beach, CA",
        "description": "One of the most beautiful courses in the world along the Monterey Peninsula.",
        "image_url": "https://images.unsplash.com/photo-1587174486073-ae5e5cff23aa",
        "price_range": "$$$$",
        "rating": 5,
    },
    {
        "name": "Torrey Pines Golf Course",
        "location": "La Jolla, CA",
        "description": "A beautiful coastal municipal course that hosts the Farmers Insurance Open.",
        "image_url": "https://images.unsplash.com/photo-1600166898405-da9535204843",
        "price_range": "$$$",
        "rating": 4,
    },
    {
        "name": "Augusta National",
        "location": "Augusta, GA",
        "description": "Home of the Masters Tournament and one of the most prestigious golf clubs.",
        "image_url": "https://images.unsplash.com/photo-1610148354090-c0c759100c6a",
        "price_range": "$$$$$",
        "rating": 5,
    },
    {
        "name": "Pinehurst No. 2",
        "location": "Pinehurst, NC",
        "description": "A historic championship course that has hosted multiple U.S. Opens.",
        "image_url": "https://images.unsplash.com/photo-1599460546755-ec4920c20cf9",
        "price_range": "$$$$",
        "rating": 5,
    },
]

OPTIONAL_COLUMNS = ["description", "image_url", "price_range", "rating"]


def seed_courses(storage: Storage) -> int:
    """Add the default catalog if no courses exist yet."""
    if storage.list_courses():
        return 0
    for data in DEFAULT_COURSES:
        storage.create_course(Course(**data))
    logger.info("Seeded %d default courses", len(DEFAULT_COURSES))
    return len(DEFAULT_COURSES)


def load_courses_csv(path) -> list:
    df = pd.read_csv(path)
    missing = {"name", "location"} - set(df.columns)
    if missing:
        raise ValueError(f"Course CSV is missing columns: {', '.join(sorted(missing))}")

    for column in OPTIONAL_COLUMNS:
        if column not in df.columns:
            df[column] = None
    df = df.dropna(subset=["name", "location"])
    df["name"] = df["name"].astype(str).str.strip()
    df["location"] = df["location"].astype(str).str.strip()
    df["rating"] = pd.to_numeric(df["rating"], errors="coerce")

    # NaN -> None so optional fields stay empty
    df = df[["name", "location"] + OPTIONAL_COLUMNS]
    df = df.astype(object).where(df.notna(), None)
    records = df.to_dict(orient="records")
    for record in records:
        if record["rating"] is not None:
            record["rating"] = int(record["rating"])
    return records


def import_courses(storage: Storage, records) -> tuple:
    existing = {(c.name, c.location) for c in storage.list_courses()}
    added = 0
    skipped = 0
    for record in records:
        key = (record["name"], record["location"])
        if key in existing:
            skipped += 1
            continue
        storage.create_course(Course(**record))
        existing.add(key)
        added += 1
    return added, skipped


def main():
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) != 2:
        print("usage: python import_courses.py <courses.csv>")
        return 1

    create_db_and_tables()
    with Session(engine) as session:
        added, skipped = import_courses(SQLStorage(session), load_courses_csv(sys.argv[1]))
    print(f"Import complete! Added {added} courses, skipped {skipped} duplicates.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
