from enum import Enum


class RoleEnum(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    PARENT = "parent"
    ADMIN = "admin"

class ContentTypeEnum(str, Enum):
    FILE = "file"
    VIDEO = "video"
    QUIZ = "quiz"
    GAME = "game"
    IMAGE = "image"

class QuizTypeEnum(str, Enum):
    GOOGLE_FORM = "google_form"
    NATIVE = "native"

class ApprovalStatusEnum(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class ProgressStatusEnum(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

class LinkStatusEnum(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class NotificationTypeEnum(str, Enum):
    CONTENT_PENDING = "content_pending"
    CONTENT_REVIEWED = "content_reviewed"
    PARENT_LINK_REQUEST = "parent_link_request"
    PARENT_LINK_RESPONSE = "parent_link_response"

QUIZ_OPTION_COUNT = 4
STUDENT_CODE_LENGTH = 6
STUDENT_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
MIN_QUIZ_SCORE = 0
MAX_QUIZ_SCORE = 100
