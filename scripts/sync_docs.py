#!/usr/bin/env python3
"""
Document sync CLI for parent-child indexing.

Usage:
    python scripts/sync_docs.py              # Incremental sync
    python scripts/sync_docs.py --reset      # Clear stores and re-index
    python scripts/sync_docs.py --dry-run    # Preview changes
    python scripts/sync_docs.py --stats      # Show store statistics
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cookbook.cli import main

if __name__ == "__main__":
    main()
