"""Main entry point for GyanSathi when run as a module"""

# ── Must run BEFORE any third-party imports ─────────────────────────────────
import logging
import sys
import os

# Force UTF-8 output on Windows (Bengali text and box characters)
if sys.stdout.encoding and sys.stdout.encoding.lower() not in ('utf-8', 'utf8'):
    try:
        sys.stdout.reconfigure(encoding='utf-8', errors='replace')
        sys.stderr.reconfigure(encoding='utf-8', errors='replace')
    except AttributeError:
        pass

# ── Root logger ──────────────────────────────────────────────────────────────
_debug = os.environ.get('GYANSATHI_DEBUG', '') not in ('', '0')
logging.basicConfig(level=logging.DEBUG if _debug else logging.WARNING,
                    format='%(levelname)s: %(message)s')

# ── Silence specific verbose libraries ──────────────────────────────────────
for _noisy in ('urllib3', 'requests', 'charset_normalizer'):
    logging.getLogger(_noisy).setLevel(logging.ERROR)

if not _debug:
    for _noisy in (
        'gyansathi.knowledge', 'gyansathi.search', 'gyansathi.engine',
        'gyansathi.wikipedia', 'gyansathi.conversation', 'gyansathi.bulk',
    ):
        logging.getLogger(_noisy).setLevel(logging.ERROR)

from gyansathi.cli import main

if __name__ == '__main__':
    main()
