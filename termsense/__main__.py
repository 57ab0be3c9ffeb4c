# Termsense project, MIT license.
# Based on Yuio, https://github.com/taminomara/yuio/
#
# You're free to copy this file to your project and edit it for your needs,
# just keep this copyright line please :3

import sys

from termsense.scripts.detect import main

if __name__ == "__main__":
    sys.exit(main())
