# This file is part of Nucfrac.
#
# Licensed under MIT License.
