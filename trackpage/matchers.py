"""
Ordered matcher composition.

A matcher is a plain function returning a capture (any non-None value) or
None. first_match() tries a list of them in priority order.
"""

import re


def first_match(matchers, *args):
    """Return the first non-None result of matcher(*args), or None."""
    for matcher in matchers:
        result = matcher(*args)
        if result is not None:
            return result
    return None


def regex_matcher(pattern, group=1, flags=0):
    """Build a matcher returning `group` of the first search hit for `pattern`."""
    compiled = re.compile(pattern, flags) if isinstance(pattern, str) else pattern

    def matcher(text):
        match = compiled.search(text)
        return match.group(group) if match else None

    matcher.pattern = compiled
    return matcher
