import sys

from .cli.hkdump import main

sys.exit(main())
