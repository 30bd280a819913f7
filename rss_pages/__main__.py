import sys

from rss_pages.cli import main

sys.exit(main())
