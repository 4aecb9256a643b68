"""
Payload shapes for the MyStat endpoints.

The remote service owns these documents. Each model lists the fields the
client relies on; unknown fields are allowed so that additions on the
server side do not break decoding. Validation only gates a response: the
data handed back to callers is the JSON exactly as received.
"""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class PayloadModel(BaseModel):
    model_config = ConfigDict(extra="allow")


# --- Profile ---
class GroupMembership(PayloadModel):
    id: int
    name: str | None = None
    group_status: int | None = None
    is_primary: bool | None = None


class GamingPoint(PayloadModel):
    new_gaming_point_types__id: int
    points: int


class UserInfo(PayloadModel):
    student_id: int
    current_group_id: int
    full_name: str | None = None
    group_name: str | None = None
    stream_id: int | None = None
    stream_name: str | None = None
    level: int | None = None
    photo: str | None = None
    gaming_points: list[GamingPoint] = Field(default_factory=list)


class UserSettings(PayloadModel):
    id: int
    email: str | None = None
    ful_name: str | None = None
    date_birth: str | None = None
    photo_path: str | None = None


class GroupSpec(PayloadModel):
    id: int
    name: str
    short_name: str | None = None


class GroupInfo(PayloadModel):
    id: int
    specs: list[GroupSpec] = Field(default_factory=list)


# --- Schedule and progress ---
class ScheduleEntry(PayloadModel):
    date: str
    lesson: int
    started_at: str
    finished_at: str
    subject_name: str | None = None
    teacher_name: str | None = None
    room_name: str | None = None


class Review(PayloadModel):
    date: str
    message: str
    spec: str | None = None
    full_spec: str | None = None
    teacher: str | None = None


class LessonVisit(PayloadModel):
    date_visit: str
    lesson_number: int
    status_was: int
    spec_id: int | None = None
    spec_name: str | None = None
    lesson_theme: str | None = None
    teacher_name: str | None = None
    class_work_mark: int | None = None
    control_work_mark: int | None = None
    home_work_mark: int | None = None
    lab_work_mark: int | None = None


class AttendanceEntry(PayloadModel):
    date: str
    has_rasp: bool | None = None
    points: float | None = None
    previous_points: float | None = None


class Exam(PayloadModel):
    exam_id: int | None = None
    date: str | None = None
    spec: str
    mark: int | None = None
    teacher: str | None = None


class StudentInfo(PayloadModel):
    id: int | None = None
    position: int | None = None
    amount: int | None = None
    full_name: str


class ActivityEntry(PayloadModel):
    date: str
    action: int
    current_point: int
    point_types_id: int | None = None
    achievements_name: str | None = None
    point_types_name: str | None = None


class ActivityLog(PayloadModel):
    date: str
    activity_log: list[ActivityEntry]


# --- Homework ---
class UploadedHomework(PayloadModel):
    id: int
    mark: int | None = None
    creation_time: str | None = None
    file_path: str | None = None
    stud_answer: str | None = None


class Homework(PayloadModel):
    id: int
    theme: str | None = None
    name_spec: str | None = None
    fio_teach: str | None = None
    creation_time: str | None = None
    completion_time: str | None = None
    overdue_time: str | None = None
    status: int | None = None
    homework_stud: UploadedHomework | None = None


class HomeworkMetadata(PayloadModel):
    currentPage: int | None = None
    totalPages: int | None = None


class HomeworkPage(PayloadModel):
    data: list[Homework]
    meta: HomeworkMetadata | None = Field(default=None, alias="_meta")
    status: int | None = None


class HomeworkCount(PayloadModel):
    counter_type: int
    counter: int


# --- News ---
class NewsEntry(PayloadModel):
    id_bbs: int
    theme: str
    time: str | None = None


class NewsDetails(NewsEntry):
    text_bbs: str
    is_viewed: bool | None = None


# --- Validators passed to RequestExecutor.execute ---
USER_INFO = TypeAdapter(UserInfo)
USER_SETTINGS = TypeAdapter(UserSettings)
GROUP_INFO_LIST = TypeAdapter(list[GroupInfo])
SCHEDULE = TypeAdapter(list[ScheduleEntry])
REVIEWS = TypeAdapter(list[Review])
VISITS = TypeAdapter(list[LessonVisit])
ATTENDANCE = TypeAdapter(list[AttendanceEntry])
EXAMS = TypeAdapter(list[Exam])
LEADERS = TypeAdapter(list[StudentInfo])
ACTIVITY = TypeAdapter(list[ActivityEntry])
ACTIVITY_LOG = TypeAdapter(list[ActivityLog])
HOMEWORK_LIST = TypeAdapter(Union[list[Homework], HomeworkPage])
HOMEWORK_COUNT = TypeAdapter(list[HomeworkCount])
UPLOADED_HOMEWORK = TypeAdapter(UploadedHomework)
NEWS = TypeAdapter(list[NewsEntry])
NEWS_DETAILS = TypeAdapter(NewsDetails)
ANY_JSON: TypeAdapter[Any] = TypeAdapter(Any)


__all__ = [
    "ActivityEntry",
    "ActivityLog",
    "AttendanceEntry",
    "Exam",
    "GroupInfo",
    "Homework",
    "HomeworkCount",
    "HomeworkPage",
    "LessonVisit",
    "NewsDetails",
    "NewsEntry",
    "Review",
    "ScheduleEntry",
    "StudentInfo",
    "UploadedHomework",
    "UserInfo",
    "UserSettings",
]
