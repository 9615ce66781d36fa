from typing import Iterable, List

from ..models import Course, LAB


def most_constrained_first(courses: Iterable[Course]) -> List[Course]:
    """Labs before theory, longer blocks first; ties keep catalog order."""
    # sorted() stays stable under reverse=True
    return sorted(courses, key=lambda c: (c.category == LAB, c.duration), reverse=True)
