# =============================================================================
# Sending
# =============================================================================
# The ways to send a Message:
#
#   deliver()             await the TransferResult, whatever the status
#   send()                await, raising DeliveryError on a non-2xx status
#   send_in_background()  schedule a Task; a completion handler receives
#                         (code, header, body) once the server has answered
#   send_sync()           blocking send() for code without an event loop
#
# All of them validate and render the message before opening a connection,
# so a ValidationError never leaves anything half-sent.
# =============================================================================

import asyncio
import logging
from typing import TYPE_CHECKING, Callable

from mailcourier.errors import DeliveryError
from mailcourier.mime.builder import MessageBuilder, RenderedMessage
from mailcourier.mime.source import BodySource
from mailcourier.smtp.client import SMTPTransport, TransferRequest, TransferResult

if TYPE_CHECKING:
    from mailcourier.core.message import Message

logger = logging.getLogger(__name__)

# Signature of completion handlers: (code, header, body)
CompletionHandler = Callable[[int, str, str], None]


def prepare(
    message: "Message",
    builder: MessageBuilder | None = None,
) -> tuple[RenderedMessage, TransferRequest]:
    """
    Validate and render a message, and describe its delivery.

    Raises:
        ValidationError: If the message is not fit to send.
    """
    rendered = (builder or MessageBuilder()).build(message)
    credentials = message.credentials

    request = TransferRequest(
        hostname=credentials.hostname,
        port=credentials.port,
        username=credentials.username,
        password=credentials.password,
        implicit_tls=credentials.implicit_tls,
        start_tls=credentials.use_tls and not credentials.implicit_tls,
        sender=rendered.sender,
        recipients=rendered.recipients,
        source=BodySource(rendered.payload),
        connect_timeout=message.connect_timeout,
        verbose=message.debug,
    )
    return rendered, request


async def deliver(
    message: "Message",
    transport: SMTPTransport | None = None,
    builder: MessageBuilder | None = None,
) -> TransferResult:
    """
    Send a message and return the server's verdict.

    Raises:
        ValidationError: Before any network activity, if the message is
            not fit to send. Delivery failures are returned, not raised.
    """
    rendered, request = prepare(message, builder)
    logger.info(
        f"Sending {rendered.message_id} to {len(request.recipients)} recipient(s)"
    )
    return await (transport or SMTPTransport()).perform(request)


async def send(
    message: "Message",
    transport: SMTPTransport | None = None,
    builder: MessageBuilder | None = None,
) -> TransferResult:
    """
    Send a message, insisting on success.

    Returns:
        The successful TransferResult.

    Raises:
        ValidationError: If the message is not fit to send.
        DeliveryError: If the server did not answer with a 2xx status.
    """
    result = await deliver(message, transport=transport, builder=builder)
    if not result.ok:
        raise DeliveryError(result.code, result.body)
    return result


def send_in_background(
    message: "Message",
    completion: CompletionHandler | None = None,
    transport: SMTPTransport | None = None,
    builder: MessageBuilder | None = None,
) -> "asyncio.Task[TransferResult]":
    """
    Start sending a message without waiting for it.

    Validation happens right away, in the caller. The returned task
    resolves to the TransferResult; if a completion handler is given it is
    called with (code, header, body) when the task finishes, successful or
    not. The handler runs on the event loop that drives the task.

    Must be called from within a running event loop.

    Raises:
        ValidationError: If the message is not fit to send.
    """
    rendered, request = prepare(message, builder)
    transport = transport or SMTPTransport()

    logger.info(
        f"Sending {rendered.message_id} to {len(request.recipients)} recipient(s) "
        f"in the background"
    )
    task = asyncio.create_task(
        transport.perform(request),
        name=f"send-{rendered.message_id}",
    )

    if completion is not None:
        def _on_done(done: "asyncio.Task[TransferResult]") -> None:
            if done.cancelled():
                logger.warning(f"Sending {rendered.message_id} was cancelled")
                return
            error = done.exception()
            if error is not None:
                logger.error(f"Sending {rendered.message_id} failed: {error!r}")
                completion(0, "", str(error))
                return
            completion(*done.result().as_tuple())

        task.add_done_callback(_on_done)

    return task


def send_sync(
    message: "Message",
    transport: SMTPTransport | None = None,
    builder: MessageBuilder | None = None,
) -> TransferResult:
    """
    Blocking version of send().

    Runs its own event loop, so it can't be used from async code.
    """
    return asyncio.run(send(message, transport=transport, builder=builder))
