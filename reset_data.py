"""
reset_data.py
-------------
Utility script to clear all stored data (accounts, rentals, transactions) from the local data.pkl file.

This script is designed for development and testing purposes.

Usage:
    $ python reset_data.py

After running this script, you can repopulate sample data by executing:
    $ python seeds.py
"""

from minerent.config import Config
from minerent.models.store import Store


def main():
    store = Store.instance(Config.DATA_PATH or None)
    store.clear()

    print("✅ Store has been successfully cleared.")
    print("💡 Tip: Run `python seeds.py` to regenerate demo data.")


if __name__ == "__main__":
    main()
