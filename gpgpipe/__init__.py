# Copyright the gpgpipe contributors
# SPDX-License-Identifier: Apache-2.0

"""
Configure base logger for gpgpipe (see gpgpipe.log for details).

"""
import gpgpipe.log

# gpgpipe version
__version__ = "1.0.0"
