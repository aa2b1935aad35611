# scripts/init_indexes.py
"""
Create the product indexes and print what the collection ends up with.

Safe to run repeatedly: indexes that already exist are skipped.

    python -m scripts.init_indexes
"""

import logging

from printwrap.database import close_client, ensure_indexes, get_products_collection


def main():
    logging.basicConfig(level=logging.INFO)
    collection = get_products_collection()
    try:
        ensure_indexes(collection)
        print("Current indexes:")
        for i, (name, info) in enumerate(collection.index_information().items(), start=1):
            print(f"{i}. {name}: {info['key']}")
    finally:
        close_client()


if __name__ == "__main__":
    main()
