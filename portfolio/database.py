"""
Portfolio Database Module
Supabase client initialization and connection management
"""

from datetime import datetime, timezone
from typing import Optional
from supabase import create_client, Client
from loguru import logger

from portfolio.config import get_settings

_supabase_client: Optional[Client] = None
_supabase_admin_client: Optional[Client] = None

WORK_ENTRY_SELECT = "*, subjects (id, name, icon)"

# Seeded for every new account, mirrors the signup trigger in the Supabase project
DEFAULT_ACHIEVEMENTS = [
    {"title": "Welcome!", "description": "Successfully created your account", "icon": "🎉", "category": "General", "completed": True},
    {"title": "First Steps", "description": "Complete your first work entry", "icon": "👣", "category": "Progress", "completed": False},
    {"title": "Dedicated", "description": "Log 10 hours of work", "icon": "💪", "category": "Progress", "completed": False},
    {"title": "Consistent", "description": "Maintain a 7-day streak", "icon": "🔥", "category": "Streaks", "completed": False},
    {"title": "Marathon", "description": "Log 100 hours total", "icon": "🏃", "category": "Milestones", "completed": False},
]


def init_supabase() -> None:
    """Initialize Supabase clients"""
    global _supabase_client, _supabase_admin_client

    settings = get_settings()

    # Regular client with anon key (respects RLS)
    _supabase_client = create_client(
        settings.supabase_url,
        settings.supabase_anon_key
    )

    # Admin client with service role key (bypasses RLS)
    _supabase_admin_client = create_client(
        settings.supabase_url,
        settings.supabase_service_key
    )

    logger.info("Supabase clients initialized successfully")


def get_supabase() -> Client:
    """Get the regular Supabase client (with RLS)"""
    if _supabase_client is None:
        init_supabase()
    return _supabase_client


def get_supabase_admin() -> Client:
    """Get the admin Supabase client (bypasses RLS)"""
    if _supabase_admin_client is None:
        init_supabase()
    return _supabase_admin_client


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Database:
    """Database operations wrapper for Supabase"""

    def __init__(self, use_admin: bool = False):
        self.client = get_supabase_admin() if use_admin else get_supabase()
        self.use_admin = use_admin
        logger.debug(f"[DB] Database instance created (admin: {use_admin})")

    # ==========================================
    # User Profiles
    # ==========================================

    async def get_profile(self, user_id: str) -> Optional[dict]:
        """Get a user profile by auth user ID"""
        logger.debug(f"[DB] get_profile: {user_id}")
        try:
            result = self.client.table("user_profiles").select("*").eq("id", user_id).maybe_single().execute()
            if result and result.data:
                logger.debug(f"[DB] Profile found: {user_id} (role: {result.data.get('role')})")
                return result.data
            logger.debug(f"[DB] No profile found for {user_id}")
            return None
        except Exception as e:
            logger.error(f"[DB] Error getting profile {user_id}: {e}")
            return None

    async def create_profile(self, data: dict) -> Optional[dict]:
        """Create (or refresh) a user profile along with its statistics row and default achievements"""
        user_id = data.get("id")
        logger.info(f"[DB] create_profile: {data.get('email')} - role: {data.get('role')}")
        try:
            result = self.client.table("user_profiles").upsert(data).execute()
            profile = result.data[0] if result.data else None
            if not profile:
                return None

            self.client.table("user_statistics").upsert(
                {
                    "user_id": user_id,
                    "total_hours": 0,
                    "average_daily_hours": 0,
                    "max_session_hours": 0,
                    "days_since_start": 0,
                    "current_streak": 0,
                    "updated_at": _now_iso(),
                },
                on_conflict="user_id",
                ignore_duplicates=True,
            ).execute()

            await self.create_default_achievements(user_id)
            logger.info(f"[DB] Profile created: {user_id}")
            return profile
        except Exception as e:
            logger.error(f"[DB] Error creating profile for {data.get('email')}: {e}")
            return None

    async def count_profiles_by_role(self) -> dict:
        """Count profiles per role"""
        logger.debug("[DB] count_profiles_by_role")
        try:
            result = self.client.table("user_profiles").select("role").execute()
            counts: dict = {}
            for row in result.data or []:
                role = row.get("role") or "regular"
                counts[role] = counts.get(role, 0) + 1
            return counts
        except Exception as e:
            logger.error(f"[DB] Error counting profiles: {e}")
            return {}

    # ==========================================
    # Access Tokens
    # ==========================================

    async def get_active_token(self, token: str) -> Optional[dict]:
        """Get an access token row if it exists and is active"""
        logger.debug("[DB] get_active_token")
        try:
            result = self.client.table("user_tokens").select("*").eq("token", token).eq("is_active", True).maybe_single().execute()
            return result.data if result and result.data else None
        except Exception as e:
            logger.error(f"[DB] Error looking up access token: {e}")
            return None

    async def get_token(self, token: str) -> Optional[dict]:
        """Get an access token row whether or not it is still active"""
        logger.debug("[DB] get_token")
        try:
            result = self.client.table("user_tokens").select("*").eq("token", token).maybe_single().execute()
            return result.data if result and result.data else None
        except Exception as e:
            logger.error(f"[DB] Error looking up access token: {e}")
            return None

    async def is_token_valid(self, token: str) -> bool:
        """Check whether an access token can be redeemed"""
        if not token:
            return False
        return await self.get_active_token(token) is not None

    async def get_tokens(self) -> list:
        """Get all access tokens"""
        logger.debug("[DB] get_tokens")
        try:
            result = self.client.table("user_tokens").select("*").order("created_at", desc=True).execute()
            return result.data or []
        except Exception as e:
            logger.error(f"[DB] Error getting access tokens: {e}")
            return []

    async def create_token(self, data: dict) -> Optional[dict]:
        """Create a new access token"""
        logger.info(f"[DB] create_token: {data.get('description')}")
        try:
            result = self.client.table("user_tokens").insert(data).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"[DB] Error creating access token: {e}")
            return None

    async def deactivate_token(self, token_id: str) -> Optional[dict]:
        """Deactivate an access token"""
        logger.info(f"[DB] deactivate_token: {token_id}")
        try:
            result = self.client.table("user_tokens").update({"is_active": False}).eq("id", token_id).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"[DB] Error deactivating access token {token_id}: {e}")
            return None

    # ==========================================
    # Blog Posts
    # ==========================================

    async def get_blog_posts(self, user_id: Optional[str] = None) -> list:
        """Get blog posts: all of a user's posts when user_id is given, otherwise only published ones"""
        logger.debug(f"[DB] get_blog_posts: user_id={user_id}")
        try:
            query = self.client.table("blog_posts").select("*").order("created_at", desc=True)
            if user_id:
                query = query.eq("user_id", user_id)
            else:
                query = query.eq("published", True)
            result = query.execute()
            logger.debug(f"[DB] Found {len(result.data or [])} blog posts")
            return result.data or []
        except Exception as e:
            logger.error(f"[DB] Error getting blog posts: {e}")
            return []

    async def get_blog_post(self, post_id: str) -> Optional[dict]:
        """Get a specific blog post"""
        logger.debug(f"[DB] get_blog_post: {post_id}")
        try:
            result = self.client.table("blog_posts").select("*").eq("id", post_id).maybe_single().execute()
            return result.data if result and result.data else None
        except Exception as e:
            logger.error(f"[DB] Error getting blog post {post_id}: {e}")
            return None

    async def create_blog_post(self, data: dict) -> Optional[dict]:
        """Create a new blog post"""
        logger.info(f"[DB] create_blog_post: title={data.get('title')}")
        try:
            result = self.client.table("blog_posts").insert(data).execute()
            if result.data:
                logger.info(f"[DB] Blog post created: {result.data[0].get('id')}")
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"[DB] Error creating blog post: {e}")
            return None

    async def update_blog_post(self, post_id: str, data: dict) -> Optional[dict]:
        """Update a blog post"""
        logger.info(f"[DB] update_blog_post: {post_id} - fields: {list(data.keys())}")
        try:
            result = self.client.table("blog_posts").update(data).eq("id", post_id).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"[DB] Error updating blog post {post_id}: {e}")
            return None

    async def delete_blog_post(self, post_id: str) -> bool:
        """Delete a blog post (comments cascade)"""
        logger.info(f"[DB] delete_blog_post: {post_id}")
        try:
            self.client.table("blog_posts").delete().eq("id", post_id).execute()
            return True
        except Exception as e:
            logger.error(f"[DB] Error deleting blog post {post_id}: {e}")
            return False

    # ==========================================
    # Blog Comments
    # ==========================================

    async def get_comments(self, post_id: str) -> list:
        """Get all comments on a post, oldest first"""
        logger.debug(f"[DB] get_comments: post_id={post_id}")
        try:
            result = self.client.table("blog_comments").select("*").eq("post_id", post_id).order("created_at").execute()
            return result.data or []
        except Exception as e:
            logger.error(f"[DB] Error getting comments for post {post_id}: {e}")
            return []

    async def get_comment(self, comment_id: str) -> Optional[dict]:
        """Get a specific comment"""
        logger.debug(f"[DB] get_comment: {comment_id}")
        try:
            result = self.client.table("blog_comments").select("*").eq("id", comment_id).maybe_single().execute()
            return result.data if result and result.data else None
        except Exception as e:
            logger.error(f"[DB] Error getting comment {comment_id}: {e}")
            return None

    async def create_comment(self, data: dict) -> Optional[dict]:
        """Create a new comment"""
        logger.info(f"[DB] create_comment: post_id={data.get('post_id')}, user_id={data.get('user_id')}")
        try:
            result = self.client.table("blog_comments").insert(data).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"[DB] Error creating comment: {e}")
            return None

    async def update_comment(self, comment_id: str, data: dict) -> Optional[dict]:
        """Update a comment"""
        logger.info(f"[DB] update_comment: {comment_id}")
        try:
            result = self.client.table("blog_comments").update(data).eq("id", comment_id).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"[DB] Error updating comment {comment_id}: {e}")
            return None

    async def delete_comment(self, comment_id: str) -> bool:
        """Delete a comment"""
        logger.info(f"[DB] delete_comment: {comment_id}")
        try:
            self.client.table("blog_comments").delete().eq("id", comment_id).execute()
            return True
        except Exception as e:
            logger.error(f"[DB] Error deleting comment {comment_id}: {e}")
            return False

    # ==========================================
    # Projects
    # ==========================================

    async def get_projects(self, user_id: Optional[str] = None) -> list:
        """Get projects, optionally restricted to one owner"""
        logger.debug(f"[DB] get_projects: user_id={user_id}")
        try:
            query = self.client.table("projects").select("*").order("created_at", desc=True)
            if user_id:
                query = query.eq("user_id", user_id)
            result = query.execute()
            return result.data or []
        except Exception as e:
            logger.error(f"[DB] Error getting projects: {e}")
            return []

    async def get_project(self, project_id: str) -> Optional[dict]:
        """Get a specific project"""
        logger.debug(f"[DB] get_project: {project_id}")
        try:
            result = self.client.table("projects").select("*").eq("id", project_id).maybe_single().execute()
            return result.data if result and result.data else None
        except Exception as e:
            logger.error(f"[DB] Error getting project {project_id}: {e}")
            return None

    async def create_project(self, data: dict) -> Optional[dict]:
        """Create a new project"""
        logger.info(f"[DB] create_project: title={data.get('title')}")
        try:
            result = self.client.table("projects").insert(data).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"[DB] Error creating project: {e}")
            return None

    async def update_project(self, project_id: str, data: dict) -> Optional[dict]:
        """Update a project"""
        logger.info(f"[DB] update_project: {project_id} - fields: {list(data.keys())}")
        try:
            result = self.client.table("projects").update(data).eq("id", project_id).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"[DB] Error updating project {project_id}: {e}")
            return None

    async def delete_project(self, project_id: str) -> bool:
        """Delete a project"""
        logger.info(f"[DB] delete_project: {project_id}")
        try:
            self.client.table("projects").delete().eq("id", project_id).execute()
            return True
        except Exception as e:
            logger.error(f"[DB] Error deleting project {project_id}: {e}")
            return False

    # ==========================================
    # Subjects
    # ==========================================

    async def get_subjects(self, user_id: str) -> list:
        """Get all subjects for a user, newest first"""
        logger.debug(f"[DB] get_subjects: user_id={user_id}")
        try:
            result = self.client.table("subjects").select("*").eq("user_id", user_id).order("created_at", desc=True).execute()
            logger.debug(f"[DB] Found {len(result.data or [])} subjects")
            return result.data or []
        except Exception as e:
            logger.error(f"[DB] Error getting subjects: {e}")
            return []

    async def get_subject(self, subject_id: str) -> Optional[dict]:
        """Get a specific subject"""
        logger.debug(f"[DB] get_subject: {subject_id}")
        try:
            result = self.client.table("subjects").select("*").eq("id", subject_id).maybe_single().execute()
            return result.data if result and result.data else None
        except Exception as e:
            logger.error(f"[DB] Error getting subject {subject_id}: {e}")
            return None

    async def create_subject(self, data: dict) -> Optional[dict]:
        """Create a new subject"""
        logger.info(f"[DB] create_subject: name={data.get('name')}, target={data.get('target_hours')}")
        try:
            result = self.client.table("subjects").insert(data).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"[DB] Error creating subject: {e}")
            return None

    async def update_subject(self, subject_id: str, data: dict) -> Optional[dict]:
        """Update a subject"""
        logger.info(f"[DB] update_subject: {subject_id} - fields: {list(data.keys())}")
        try:
            result = self.client.table("subjects").update(data).eq("id", subject_id).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"[DB] Error updating subject {subject_id}: {e}")
            return None

    async def delete_subject(self, subject_id: str) -> bool:
        """Delete a subject (work entries cascade)"""
        logger.info(f"[DB] delete_subject: {subject_id}")
        try:
            self.client.table("subjects").delete().eq("id", subject_id).execute()
            return True
        except Exception as e:
            logger.error(f"[DB] Error deleting subject {subject_id}: {e}")
            return False

    # ==========================================
    # Work Entries
    # ==========================================

    async def get_work_entries(
        self,
        user_id: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: Optional[int] = None
    ) -> list:
        """Get work entries for a user, newest first, with their subject"""
        logger.debug(f"[DB] get_work_entries: user_id={user_id}, range={start_date} to {end_date}, limit={limit}")
        try:
            query = self.client.table("work_entries").select(WORK_ENTRY_SELECT).eq("user_id", user_id)
            if start_date:
                query = query.gte("entry_date", start_date)
            if end_date:
                query = query.lte("entry_date", end_date)
            query = query.order("entry_date", desc=True)
            if limit:
                query = query.limit(limit)
            result = query.execute()
            logger.debug(f"[DB] Found {len(result.data or [])} work entries")
            return result.data or []
        except Exception as e:
            logger.error(f"[DB] Error getting work entries: {e}")
            return []

    async def get_work_entries_for_subject(self, subject_id: str) -> list:
        """Get the hours of every entry logged against a subject"""
        logger.debug(f"[DB] get_work_entries_for_subject: {subject_id}")
        try:
            result = self.client.table("work_entries").select("id, subject_id, hours, entry_date").eq("subject_id", subject_id).execute()
            return result.data or []
        except Exception as e:
            logger.error(f"[DB] Error getting work entries for subject {subject_id}: {e}")
            return []

    async def get_work_entry(self, entry_id: str) -> Optional[dict]:
        """Get a specific work entry"""
        logger.debug(f"[DB] get_work_entry: {entry_id}")
        try:
            result = self.client.table("work_entries").select(WORK_ENTRY_SELECT).eq("id", entry_id).maybe_single().execute()
            return result.data if result and result.data else None
        except Exception as e:
            logger.error(f"[DB] Error getting work entry {entry_id}: {e}")
            return None

    async def create_work_entry(self, data: dict) -> Optional[dict]:
        """Create a new work entry"""
        logger.info(f"[DB] create_work_entry: subject={data.get('subject_id')}, hours={data.get('hours')}, date={data.get('entry_date')}")
        try:
            result = self.client.table("work_entries").insert(data).execute()
            if result.data:
                logger.info(f"[DB] Work entry created: {result.data[0].get('id')}")
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"[DB] Error creating work entry: {e}")
            return None

    async def update_work_entry(self, entry_id: str, data: dict) -> Optional[dict]:
        """Update a work entry"""
        logger.info(f"[DB] update_work_entry: {entry_id} - fields: {list(data.keys())}")
        try:
            result = self.client.table("work_entries").update(data).eq("id", entry_id).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"[DB] Error updating work entry {entry_id}: {e}")
            return None

    async def delete_work_entry(self, entry_id: str) -> bool:
        """Delete a work entry"""
        logger.info(f"[DB] delete_work_entry: {entry_id}")
        try:
            self.client.table("work_entries").delete().eq("id", entry_id).execute()
            return True
        except Exception as e:
            logger.error(f"[DB] Error deleting work entry {entry_id}: {e}")
            return False

    # ==========================================
    # Achievements
    # ==========================================

    async def get_achievements(self, user_id: str) -> list:
        """Get all achievements for a user"""
        logger.debug(f"[DB] get_achievements: user_id={user_id}")
        try:
            result = self.client.table("achievements").select("*").eq("user_id", user_id).order("created_at", desc=True).execute()
            return result.data or []
        except Exception as e:
            logger.error(f"[DB] Error getting achievements: {e}")
            return []

    async def get_achievement(self, achievement_id: str) -> Optional[dict]:
        """Get a specific achievement"""
        logger.debug(f"[DB] get_achievement: {achievement_id}")
        try:
            result = self.client.table("achievements").select("*").eq("id", achievement_id).maybe_single().execute()
            return result.data if result and result.data else None
        except Exception as e:
            logger.error(f"[DB] Error getting achievement {achievement_id}: {e}")
            return None

    async def create_achievement(self, data: dict) -> Optional[dict]:
        """Create a new achievement"""
        logger.info(f"[DB] create_achievement: title={data.get('title')}")
        try:
            result = self.client.table("achievements").insert(data).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"[DB] Error creating achievement: {e}")
            return None

    async def create_default_achievements(self, user_id: str) -> list:
        """Seed the default achievements for a new account"""
        logger.info(f"[DB] create_default_achievements: user_id={user_id}")
        rows = [{"user_id": user_id, **achievement} for achievement in DEFAULT_ACHIEVEMENTS]
        try:
            result = self.client.table("achievements").insert(rows).execute()
            logger.info(f"[DB] Created {len(result.data or [])} default achievements")
            return result.data or []
        except Exception as e:
            logger.error(f"[DB] Error creating default achievements: {e}")
            return []

    async def update_achievement(self, achievement_id: str, data: dict) -> Optional[dict]:
        """Update an achievement"""
        logger.info(f"[DB] update_achievement: {achievement_id} - fields: {list(data.keys())}")
        try:
            result = self.client.table("achievements").update(data).eq("id", achievement_id).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"[DB] Error updating achievement {achievement_id}: {e}")
            return None

    # ==========================================
    # User Statistics
    # ==========================================

    async def get_statistics(self, user_id: str) -> Optional[dict]:
        """Get the cached statistics row for a user"""
        logger.debug(f"[DB] get_statistics: user_id={user_id}")
        try:
            result = self.client.table("user_statistics").select("*").eq("user_id", user_id).maybe_single().execute()
            return result.data if result and result.data else None
        except Exception as e:
            logger.error(f"[DB] Error getting statistics for {user_id}: {e}")
            return None

    async def upsert_statistics(self, user_id: str, stats: dict) -> Optional[dict]:
        """Replace the cached statistics row for a user"""
        logger.info(f"[DB] upsert_statistics: user_id={user_id}, total={stats.get('total_hours')}, streak={stats.get('current_streak')}")
        try:
            row = {"user_id": user_id, **stats, "updated_at": _now_iso()}
            result = self.client.table("user_statistics").upsert(row, on_conflict="user_id").execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"[DB] Error upserting statistics for {user_id}: {e}")
            return None
