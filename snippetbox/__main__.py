import sys

from snippetbox.main import main

sys.exit(main())
