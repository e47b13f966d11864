"""Which students a signed-in user may see, and how they are grouped."""

from src.classbook.models import StudentInfo, UserAccount

UNASSIGNED_COACH = "Unassigned"


def visible_students(
    students: list[StudentInfo], user: UserAccount
) -> list[StudentInfo]:
    """Filter a class roster down to the students a user coaches.

    Admins see the whole roster. A coach matches a student when the student's
    coach cell contains the user's name, or when the coach cell (minus its
    "Coach" prefix) is contained in the user's name. Sheet cells are written
    inconsistently ("Coach Lee", "Lee", "coach lee m."), hence both directions.

    A non-admin account with an empty name sees nobody. An empty name is
    contained in every coach cell, so matching it would expose the whole
    roster.

    Args:
        students: Roster in column order.
        user: The signed-in account.

    Returns:
        Matching students, still in column order.
    """
    if user.is_admin:
        return list(students)

    user_name = user.name.strip().lower()
    if not user_name:
        return []

    def _matches(student: StudentInfo) -> bool:
        coach = student.coach.lower()
        if user_name in coach:
            return True
        bare_coach = coach.replace("coach", "", 1).strip()
        return bool(bare_coach) and bare_coach in user_name

    return [student for student in students if _matches(student)]


def group_by_coach(
    students: list[StudentInfo],
) -> list[tuple[str, list[StudentInfo]]]:
    """Group consecutive students sharing a coach, keeping column order.

    A coach whose students are split by another group appears twice, the
    same way the merged header cells appear in the sheet.
    """
    groups: list[tuple[str, list[StudentInfo]]] = []
    for student in students:
        coach = student.coach.strip() or UNASSIGNED_COACH
        if groups and groups[-1][0] == coach:
            groups[-1][1].append(student)
        else:
            groups.append((coach, [student]))
    return groups
