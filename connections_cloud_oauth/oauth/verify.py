"""Dispatch to the application's verify callback.

The application decides which user, if any, the provider's profile maps to.
Its verify function receives the tokens, the profile and a ``done``
callback, and reports the result through ``done(err, user, info)``.

Two calling conventions are supported, optionally preceded by the request:

    WITH_PARAMS:    (access_token, refresh_token, params, profile, done)
    WITHOUT_PARAMS: (access_token, refresh_token, profile, done)

The convention is fixed when the Verifier is built, either explicitly or
from the number of positional parameters without defaults:

    6 parameters -> request + WITH_PARAMS (requires pass_request)
    5 parameters -> request + WITHOUT_PARAMS if pass_request,
                    else WITH_PARAMS
    4 parameters -> WITHOUT_PARAMS, never given the request

An explicit convention is checked against the function when the Verifier
is built.
"""

import inspect
import logging
from enum import Enum
from typing import Any, Callable

from ..errors import ConfigurationError, VerificationError
from .outcome import Error, Fail, Outcome, Success
from .request import AuthRequest
from .tokens import TokenResult

logger = logging.getLogger(__name__)


class VerifySignature(Enum):
    """Argument shape passed to the verify function."""

    WITH_PARAMS = "with_params"
    WITHOUT_PARAMS = "without_params"


def _positional_counts(func: Callable[..., Any]) -> tuple[int, int | None]:
    """Count required and total positional parameters.

    The total is None if the function takes *args.
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Cannot inspect verify callback {func!r}: {e}") from e

    required = 0
    total: int | None = 0
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            total = None
        elif param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            if total is not None:
                total += 1
            # Optional parameters do not count towards the arity
            if param.default is inspect.Parameter.empty:
                required += 1
    return required, total


def _positional_arity(func: Callable[..., Any]) -> int | None:
    """Count required positional parameters, or None if the function takes *args."""
    required, total = _positional_counts(func)
    return None if total is None else required


def expected_arity(signature: VerifySignature, pass_request: bool) -> int:
    """Number of positional arguments a calling convention passes."""
    with_params = signature is VerifySignature.WITH_PARAMS
    return 4 + int(with_params) + int(pass_request)


def check_signature(
    func: Callable[..., Any],
    signature: VerifySignature,
    pass_request: bool,
) -> None:
    """Ensure func accepts the arguments an explicit convention passes.

    Raises:
        ConfigurationError: If func cannot take that many positional arguments
    """
    required, total = _positional_counts(func)
    expected = expected_arity(signature, pass_request)
    if required > expected or (total is not None and total < expected):
        raise ConfigurationError(
            f"Verify callback takes {required} positional arguments but the "
            f"{signature.value} convention{' with the request' if pass_request else ''} "
            f"passes {expected}"
        )


def infer_signature(
    func: Callable[..., Any],
    pass_request: bool,
) -> tuple[VerifySignature, bool]:
    """Choose the calling convention from the function's declared arity.

    Args:
        func: The verify function
        pass_request: Whether the strategy is configured to pass the request

    Returns:
        (signature, pass_request) actually used for every call

    Raises:
        ConfigurationError: If the arity matches no supported convention
    """
    arity = _positional_arity(func)

    if arity is None:
        # Accepts anything: give it the fullest shape
        return VerifySignature.WITH_PARAMS, pass_request
    if arity == 6 and pass_request:
        return VerifySignature.WITH_PARAMS, True
    if arity == 5:
        if pass_request:
            return VerifySignature.WITHOUT_PARAMS, True
        return VerifySignature.WITH_PARAMS, False
    if arity == 4:
        return VerifySignature.WITHOUT_PARAMS, False

    raise ConfigurationError(
        f"Verify callback takes {arity} positional arguments; expected "
        f"{'4, 5 or 6' if pass_request else '4 or 5'}"
    )


class Verifier:
    """Calls the application's verify function and turns its result into an Outcome."""

    def __init__(
        self,
        func: Callable[..., Any],
        pass_request: bool = False,
        signature: VerifySignature | None = None,
    ):
        """Bind a verify function to a calling convention.

        Args:
            func: Verify function, plain or coroutine function
            pass_request: Pass the request as the first argument
            signature: Explicit convention; inferred from arity when omitted

        Raises:
            ConfigurationError: If func is not callable, its arity is
                unsupported, or it cannot take the explicit convention's arguments
        """
        if not callable(func):
            raise ConfigurationError("Strategy requires a verify callback")

        if signature is None:
            signature, pass_request = infer_signature(func, pass_request)
        else:
            check_signature(func, signature, pass_request)

        self.func = func
        self.signature = signature
        self.pass_request = pass_request

    def build_args(
        self,
        request: AuthRequest,
        token: TokenResult,
        profile: Any,
        done: Callable[..., None],
    ) -> list[Any]:
        """Assemble the positional arguments for one call."""
        args: list[Any] = [request] if self.pass_request else []
        args += [token.access_token, token.refresh_token]
        if self.signature is VerifySignature.WITH_PARAMS:
            args.append(token.params)
        args += [profile, done]
        return args

    async def __call__(
        self,
        request: AuthRequest,
        token: TokenResult,
        profile: Any,
    ) -> Outcome:
        """Run the verify function and return its outcome.

        Exceptions raised by the verify function become Error outcomes.
        Only the first call to done counts.
        """
        reported: list[Outcome] = []

        def done(err: Any = None, user: Any = None, info: Any = None) -> None:
            if reported:
                logger.warning("Verify callback reported a result more than once")
                return
            if err:
                if not isinstance(err, BaseException):
                    err = VerificationError(str(err))
                reported.append(Error(err))
            elif not user:
                reported.append(Fail(info))
            else:
                reported.append(Success(user, info))

        try:
            result = self.func(*self.build_args(request, token, profile, done))
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(f"Verify callback raised {type(e).__name__}: {e}")
            return Error(e)

        if not reported:
            return Error(VerificationError("Verify callback returned without calling done"))

        return reported[0]
