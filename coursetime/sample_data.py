from typing import List, Tuple

from .models import Course, Room, LAB, THEORY, CLASSROOM


def demo_catalog() -> Tuple[List[Course], List[Room]]:
    """One department's week: four year groups, two classrooms, two labs."""
    courses = [
        Course("CS101", "Dr. Smith", 3, THEORY, "1", 50, name="Intro to CS"),
        Course("CS101L", "Asst. John", 2, LAB, "1", 30, name="Intro Lab"),
        Course("CS202", "Dr. Jane", 3, THEORY, "2", 45, name="Data Structures"),
        Course("CS202L", "Asst. Doe", 2, LAB, "2", 35, name="DS Lab"),
        Course("CS305", "Dr. Alan", 3, THEORY, "3", 40, name="Algorithms"),
        Course("SE401", "Dr. Eng", 3, THEORY, "4", 30, name="Software Eng"),
        Course("ELEC1", "Dr. Robot", 3, THEORY, "4", 25, name="AI Elective"),
    ]
    rooms = [
        Room("A-101", 60, CLASSROOM),
        Room("A-102", 50, CLASSROOM),
        Room("L-01", 40, LAB),
        Room("L-02", 40, LAB),
    ]
    return courses, rooms
