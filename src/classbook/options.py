"""Allowed values for the editable progress fields.

Taken from the class sheet's Instruction Guide tab. The catalog is passed to
whatever needs it (see ClassSession) rather than read as module state, so a
different guide can be swapped in per deployment or per test.
"""

from pydantic import BaseModel, ConfigDict


class OptionCatalog(BaseModel):
    """Dropdown choices for specialization, level and finished lessons."""

    model_config = ConfigDict(frozen=True)

    specializations: tuple[str, ...] = ()
    levels: tuple[str, ...] = ()
    # Declaration order matters: lessons_for() takes the first key that matches
    lessons_by_specialization: dict[str, tuple[str, ...]] = {}

    def lessons_for(self, specialization: str | None) -> list[str]:
        """Return the finished-lesson choices for a specialization.

        Matching is fuzzy: the first catalog key contained in the given text
        wins, so "Coding Scratch" picks up the "Scratch" lessons when
        "Scratch" is declared first.
        """
        if not specialization:
            return []
        for key, lessons in self.lessons_by_specialization.items():
            if key in specialization:
                return list(lessons)
        return []


DEFAULT_CATALOG = OptionCatalog(
    specializations=(
        "Scratch",
        "Coding Scratch",
        "Khan Academy",
        "Trinket io",
        "Electronic Arduino",
        "Robotics Arduino",
        "App Lab",
        "TinkerCAD",
    ),
    levels=(
        "NEW RECRUIT",
        "Rookie",
        "Ro-Tinkercad2",
        "Trainee",
        "Tr-Touch Type",
        "Apprentice",
        "Enthusiast",
        "Professional",
        "Master",
        "Boss",
        "The Goat",
    ),
    lessons_by_specialization={
        "Scratch": ("Setting a Scene", "Setting a Scene Done", "Choose it yourself"),
        "Coding Scratch": ("Setting a Scene", "Setting a Scene Done"),
        "Khan Academy": ("JS3",),
        "Trinket io": ("My Python",),
        "Electronic Arduino": ("New Spark",),
        "Robotics Arduino": ("Light up that car",),
        "App Lab": ("App beginner",),
        "TinkerCAD": ("3rd Dimension",),
        "General": ("CSS everywhere",),
    },
)
