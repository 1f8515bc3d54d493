import sys

from swiftgraft.api.cli.main import main

sys.exit(main())
