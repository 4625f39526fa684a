import sys

from docextract.main import main

sys.exit(main())
