import sys

from article_importer.cli import main

sys.exit(main())
