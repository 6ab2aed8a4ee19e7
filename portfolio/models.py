"""
Portfolio Pydantic Models
Type-safe data structures for the entire application
"""

from datetime import date
from enum import Enum
from typing import Annotated, Optional, List
from pydantic import BaseModel, Field, StringConstraints


# ==========================================
# ENUMS
# ==========================================

class Role(str, Enum):
    ADMIN = "admin"
    SPECIALIZED = "specialized"
    REGULAR = "regular"


class AccessRequirement(str, Enum):
    NONE = "none"
    AUTHENTICATED = "authenticated"
    SPECIALIZED = "specialized"
    ADMIN = "admin"


class AccessOutcome(str, Enum):
    LOADING = "loading"
    NEEDS_LOGIN = "needs_login"
    DENIED = "denied"
    ALLOW = "allow"


class ProjectStatus(str, Enum):
    PLANNING = "Planning"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    ON_HOLD = "On Hold"


# ==========================================
# AUTH MODELS
# ==========================================

class Permissions(BaseModel):
    """Capabilities derived from a role"""
    is_admin: bool = False
    is_specialized: bool = False
    is_regular: bool = True
    has_hours_access: bool = False
    can_comment: bool = False
    can_edit_content: bool = False


class UserProfile(BaseModel):
    """Profile as returned to the client"""
    id: str
    email: str
    role: Role = Role.REGULAR
    token_used: Optional[str] = None
    permissions: Permissions = Field(default_factory=Permissions)


class TokenValidationRequest(BaseModel):
    token: str = Field(min_length=1)


class AuthState(BaseModel):
    """Snapshot of the caller's session, passed explicitly to the access evaluator"""
    is_loading: bool = False
    is_authenticated: bool = False
    role: Optional[str] = None


class AccessDecision(BaseModel):
    """What the client should render for a protected view"""
    outcome: AccessOutcome
    requirement: AccessRequirement
    required_role: Optional[Role] = None
    title: Optional[str] = None
    message: Optional[str] = None


# ==========================================
# BLOG MODELS
# ==========================================

class BlogPostCreate(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    published: bool = False


class BlogPostUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    published: Optional[bool] = None


# Blank after trimming is rejected
CommentText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CommentCreate(BaseModel):
    content: CommentText


class CommentUpdate(BaseModel):
    content: CommentText


# ==========================================
# PROJECT MODELS
# ==========================================

class ProjectCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    technologies: List[str] = Field(default_factory=list)
    status: ProjectStatus = ProjectStatus.PLANNING
    github_url: Optional[str] = None
    live_demo_url: Optional[str] = None
    start_date: Optional[date] = None


class ProjectUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    technologies: Optional[List[str]] = None
    status: Optional[ProjectStatus] = None
    github_url: Optional[str] = None
    live_demo_url: Optional[str] = None
    start_date: Optional[date] = None


# ==========================================
# HOURS MODELS
# ==========================================

class SubjectCreate(BaseModel):
    name: str = Field(min_length=1)
    target_hours: float = Field(ge=0)
    icon: str = "📚"


class SubjectUpdate(BaseModel):
    name: Optional[str] = None
    target_hours: Optional[float] = Field(default=None, ge=0)
    icon: Optional[str] = None


class WorkEntryCreate(BaseModel):
    subject_id: str
    hours: float = Field(gt=0, description="Hours worked in this session")
    description: str = Field(min_length=1)
    entry_date: date = Field(default_factory=date.today)


class WorkEntryUpdate(BaseModel):
    subject_id: Optional[str] = None
    hours: Optional[float] = Field(default=None, gt=0)
    description: Optional[str] = None
    entry_date: Optional[date] = None


class AchievementCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    icon: str = "🏆"
    category: str = "General"


# ==========================================
# STATISTICS MODELS
# ==========================================

class DerivedStatistics(BaseModel):
    """Recomputable summary of a user's work history"""
    total_hours: float = 0
    average_daily_hours: float = 0
    max_session_hours: float = 0
    days_since_start: int = 0
    current_streak: int = 0


# ==========================================
# ADMIN MODELS
# ==========================================

class AccessTokenCreate(BaseModel):
    token: str = Field(min_length=4)
    description: Optional[str] = None
