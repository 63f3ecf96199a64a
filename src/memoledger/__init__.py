"""memoledger: a local register of school administrative memos.

Layout:
    <data_dir>/
    ├── memos.json          # {"schema_version": 1, "memos": [...]}
    └── departments.json    # {"schema_version": 1, "departments": [...]}

The repository owns both entries; query and stats work on plain tuples of
Memo records and never touch storage.
"""

__version__ = "0.1.0"
