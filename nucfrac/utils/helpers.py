# This file is part of Nucfrac.
#
# Licensed under MIT License.


def format_minutes(seconds):
    if seconds < 60:
        return f'{seconds:.1f} sec.'
    return f'{int(seconds // 60)} min. {seconds % 60:.0f} sec.'
