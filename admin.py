import logging
from sqladmin import Admin, ModelView
from sqladmin.authentication import AuthenticationBackend
from starlette.requests import Request
from models import User, FlashcardSet, Flashcard, UserSession
from database import engine, SessionLocal
from auth import authenticate_user, create_access_token, decode_username, get_user
from config import SECRET_KEY

logger = logging.getLogger(__name__)


class AdminAuth(AuthenticationBackend):
    async def login(self, request: Request) -> bool:
        form = await request.form()
        username = form["username"]
        password = form["password"]

        async with SessionLocal() as db:
            user = await authenticate_user(db, username, password)
            if user and user.is_superuser:
                token = create_access_token({"sub": user.username})
                request.session.update({"token": f"Bearer {token}"})
                logger.info(f"Administrator {username!r} logged in")
                return True
        logger.warning(f"Rejected admin login for {username!r}")
        return False

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        token = request.session.get("token")
        if not token:
            return False

        username = decode_username(token)
        if username is None:
            return False

        async with SessionLocal() as db:
            user = await get_user(db, username)
            if user and user.is_superuser:
                request.state.user = user
                return True
        return False


class UserAdmin(ModelView, model=User):
    column_list = [User.id, User.username, User.is_superuser]
    column_details_list = [User.id, User.username, User.is_superuser]
    form_excluded_columns = [User.hashed_password]
    can_create = False
    can_edit = True
    can_delete = True
    name = "User"
    name_plural = "Users"


class FlashcardSetAdmin(ModelView, model=FlashcardSet):
    column_list = [FlashcardSet.id, FlashcardSet.title, FlashcardSet.created_by, FlashcardSet.updated_at]
    column_details_list = [
        FlashcardSet.id, FlashcardSet.title, FlashcardSet.description, FlashcardSet.created_by,
        FlashcardSet.created_at, FlashcardSet.updated_at,
    ]
    column_searchable_list = [FlashcardSet.title, FlashcardSet.description]
    column_default_sort = [(FlashcardSet.created_at, True)]
    form_columns = [FlashcardSet.title, FlashcardSet.description, FlashcardSet.created_by]
    can_create = True
    can_edit = True
    can_delete = True
    name = "Flashcard set"
    name_plural = "Flashcard sets"


class FlashcardAdmin(ModelView, model=Flashcard):
    column_list = [Flashcard.id, Flashcard.set_id, Flashcard.front_text, Flashcard.back_text]
    column_details_list = [
        Flashcard.id, Flashcard.set_id, Flashcard.front_text, Flashcard.back_text,
        Flashcard.front_image_url, Flashcard.back_image_url, Flashcard.created_at, Flashcard.updated_at,
    ]
    column_searchable_list = [Flashcard.front_text, Flashcard.back_text]
    form_columns = [
        Flashcard.flashcard_set, Flashcard.front_text, Flashcard.back_text,
        Flashcard.front_image_url, Flashcard.back_image_url,
    ]
    can_create = True
    can_edit = True
    can_delete = True
    name = "Flashcard"
    name_plural = "Flashcards"


class UserSessionAdmin(ModelView, model=UserSession):
    column_list = [UserSession.session_id, UserSession.ip_address, UserSession.created_at, UserSession.last_activity]
    column_default_sort = [(UserSession.last_activity, True)]
    can_create = False
    can_edit = False
    can_delete = True
    name = "Visitor"
    name_plural = "Visitors"


def setup_admin(app):
    authentication_backend = AdminAuth(secret_key=SECRET_KEY)
    admin = Admin(app, engine, authentication_backend=authentication_backend, title="Decksy Admin")
    admin.add_view(FlashcardSetAdmin)
    admin.add_view(FlashcardAdmin)
    admin.add_view(UserSessionAdmin)
    admin.add_view(UserAdmin)
    return admin
