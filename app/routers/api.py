"""API routes: JSON for game state, security measures, attacks, notifications and the vault.

Every mutating route is: validate body -> load snapshot -> one game operation
-> store snapshot -> return the full snapshot.
"""
import logging
from dataclasses import dataclass
from typing import Annotated, Callable

from fastapi import APIRouter, Depends, Request, Response

from app.core.config import get_settings
from app.core.errors import GameError, StoreError
from app.core.security import create_session_token, new_session_id, verify_session_token
from app.db.session import SessionStore, get_store
from app.schemas.attacks import AttackStatusSchema, GeneratedPasswordSchema, StatsOutSchema
from app.schemas.game import GameState
from app.schemas.requests import (
    AccountCreationStepRequest,
    AttackFlowStepRequest,
    ConfigureSecurityRequest,
    CreateAccountRequest,
    DeleteNotificationRequest,
    DeletePasswordRequest,
    ExecuteAttackRequest,
    GeneratePasswordRequest,
    RecoveryEmailRequest,
    RespondToNotificationRequest,
    SavePasswordRequest,
    SecurityFlowStepRequest,
    SecurityQuestionRequest,
    StrongPasswordRequest,
    UpdateSecurityRequest,
)
from app.services import game
from app.services.attacks import describe_attacks
from app.services.game import GameContext
from app.services.passwords import calculate_password_strength, generate_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])
settings = get_settings()


# ---------- session plumbing ----------

def get_or_create_session_id(request: Request, response: Response) -> str:
    sid = verify_session_token(request.cookies.get(settings.session_cookie_name))
    if not sid:
        sid = new_session_id()
        response.set_cookie(
            settings.session_cookie_name,
            create_session_token(sid),
            max_age=settings.session_cookie_max_age,
            httponly=True,
            samesite="lax",
        )
    return sid


def get_context(request: Request) -> GameContext:
    return request.app.state.game_context


@dataclass
class GameSession:
    session_id: str
    store: SessionStore
    ctx: GameContext

    def load(self) -> GameState:
        try:
            state = self.store.get(self.session_id)
            if state is None:
                state = game.new_game_state()
                self.store.put(self.session_id, state)
                logger.debug(f"Created game state for session {self.session_id}")
            return state
        except GameError:
            raise
        except Exception as e:
            logger.exception("Failed to read game state")
            raise StoreError("Failed to read game state") from e

    def save(self, state: GameState) -> None:
        try:
            self.store.put(self.session_id, state)
        except GameError:
            raise
        except Exception as e:
            logger.exception("Failed to write game state")
            raise StoreError("Failed to write game state") from e

    def reset(self) -> GameState:
        try:
            return self.store.reset(self.session_id)
        except GameError:
            raise
        except Exception as e:
            logger.exception("Failed to reset game state")
            raise StoreError("Failed to reset game state") from e

    def apply(self, operation: Callable[..., GameState], *args, **kwargs) -> GameState:
        """Run one operation against the stored snapshot; store only a complete result."""
        new_state = operation(self.load(), *args, ctx=self.ctx, **kwargs)
        self.save(new_state)
        return new_state


def get_game_session(
    session_id: Annotated[str, Depends(get_or_create_session_id)],
    store: Annotated[SessionStore, Depends(get_store)],
    ctx: Annotated[GameContext, Depends(get_context)],
) -> GameSession:
    return GameSession(session_id=session_id, store=store, ctx=ctx)


SessionDep = Annotated[GameSession, Depends(get_game_session)]


# ---------- game ----------

@router.get("/game-state", response_model=GameState)
async def get_game_state(session: SessionDep):
    return session.load()


@router.post("/game/start", response_model=GameState)
async def start_game(session: SessionDep):
    return session.apply(game.start_game)


@router.post("/game/reset", response_model=GameState)
async def reset_game(session: SessionDep):
    return session.reset()


@router.post("/tutorial/complete", response_model=GameState)
async def complete_tutorial(session: SessionDep):
    return session.apply(game.complete_tutorial)


@router.get("/stats", response_model=StatsOutSchema)
async def get_stats(session: SessionDep):
    """Vulnerability, security level and label, attack counters."""
    return game.summarize(session.load())


# ---------- account ----------

@router.post("/account/create", response_model=GameState)
async def create_account(body: CreateAccountRequest, session: SessionDep):
    return session.apply(game.create_account, body.name, body.email, body.password)


@router.post("/account/step", response_model=GameState)
async def account_step(body: AccountCreationStepRequest, session: SessionDep):
    data = body.data
    return session.apply(
        game.set_account_step,
        body.step,
        name=data.name if data else None,
        email=data.email if data else None,
        password=data.password if data else None,
    )


# ---------- security ----------

@router.post("/security/update", response_model=GameState)
async def update_security(body: UpdateSecurityRequest, session: SessionDep):
    return session.apply(game.update_security, body.measure, body.enabled)


@router.post("/security/configure", response_model=GameState)
async def configure_security(body: ConfigureSecurityRequest, session: SessionDep):
    return session.apply(game.configure_measure, body.root)


@router.post("/security/strong-password", response_model=GameState)
async def configure_strong_password(body: StrongPasswordRequest, session: SessionDep):
    # body.strength is ignored: strength is recomputed server-side
    return session.apply(game.configure_strong_password, body.password)


@router.post("/security/security-question", response_model=GameState)
async def configure_security_question(body: SecurityQuestionRequest, session: SessionDep):
    return session.apply(game.configure_security_question, body.question, body.answer)


@router.post("/security/two-factor", response_model=GameState)
async def request_two_factor(session: SessionDep):
    return session.apply(game.request_two_factor)


@router.post("/security/email-verification", response_model=GameState)
async def request_email_verification(session: SessionDep):
    return session.apply(game.request_email_verification)


@router.post("/security/recovery-email", response_model=GameState)
async def configure_recovery_email(body: RecoveryEmailRequest, session: SessionDep):
    return session.apply(game.configure_recovery_email, body.email)


@router.post("/security/flow", response_model=GameState)
async def security_flow_step(body: SecurityFlowStepRequest, session: SessionDep):
    return session.apply(game.update_security_flow, body.flow_type, body.step, body.data)


# ---------- attacks ----------

@router.get("/attacks", response_model=list[AttackStatusSchema])
async def list_attacks(session: SessionDep):
    """Attack catalogue with live success chance and remaining cooldown."""
    return describe_attacks(session.load(), session.ctx.now())


@router.post("/attack/execute", response_model=GameState)
async def execute_attack(body: ExecuteAttackRequest, session: SessionDep):
    return session.apply(game.execute_attack, body.attack_id)


@router.post("/attack/step", response_model=GameState)
async def attack_flow_step(body: AttackFlowStepRequest, session: SessionDep):
    return session.apply(game.update_attack_flow, body.attack_id, body.step, body.data)


# ---------- notifications ----------

@router.post("/notification/respond", response_model=GameState)
async def respond_to_notification(body: RespondToNotificationRequest, session: SessionDep):
    return session.apply(game.respond_to_notification, body.notification_id, body.accepted)


@router.post("/notification/delete", response_model=GameState)
async def delete_notification(body: DeleteNotificationRequest, session: SessionDep):
    return session.apply(game.delete_notification, body.notification_id)


# ---------- password vault ----------

@router.post("/passwords/save", response_model=GameState)
async def save_password(body: SavePasswordRequest, session: SessionDep):
    return session.apply(
        game.save_password,
        body.title,
        body.password,
        website=body.website,
        username=body.username,
        category=body.category,
    )


@router.post("/passwords/delete", response_model=GameState)
async def delete_password(body: DeletePasswordRequest, session: SessionDep):
    return session.apply(game.delete_password, body.id)


@router.post("/passwords/generate", response_model=GeneratedPasswordSchema)
async def generate(
    ctx: Annotated[GameContext, Depends(get_context)],
    body: GeneratePasswordRequest | None = None,
):
    body = body or GeneratePasswordRequest()
    password = generate_password(
        length=body.length,
        include_symbols=body.include_symbols,
        include_numbers=body.include_numbers,
        rand=ctx.random,
    )
    return GeneratedPasswordSchema(password=password, strength=calculate_password_strength(password))
