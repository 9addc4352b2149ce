import sys

from story_automation.cli import main

sys.exit(main())
