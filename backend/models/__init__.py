from .quest import (
    Lesson,
    LessonState,
    ProgressState,
    TrailLessonDto,
    TrailResponse,
    CompleteLessonRequest,
    CompleteLessonResponse,
    GeneratePathRequest,
    GeneratePathResponse,
)
from .project import Project, InstagramMetrics, XpBonusDto, ProjectDto
from .passions import PassionOption
