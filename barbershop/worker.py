"""
This module contains the Celery worker and tasks for the reservation service.
"""
import logging

from celery import Celery
from kombu.exceptions import KombuError

from . import config
from .errors import NotificationFailure
from .notifications import NotificationFactory, NotificationMessage

# Configure logging
logger = logging.getLogger(__name__)

app = Celery('tasks',
             broker=config.CELERY_BROKER_URL,
             backend=config.CELERY_RESULT_BACKEND,
             include=["barbershop.worker"])
app.conf.task_always_eager = config.CELERY_TASK_ALWAYS_EAGER
# Publishing gives up quickly when the broker is unreachable
app.conf.broker_connection_timeout = config.CELERY_CONNECT_TIMEOUT
app.conf.broker_transport_options = {
    "socket_connect_timeout": config.CELERY_CONNECT_TIMEOUT,
    "socket_timeout": config.CELERY_CONNECT_TIMEOUT,
    "max_retries": 0,
}
app.conf.redis_socket_connect_timeout = config.CELERY_CONNECT_TIMEOUT
app.conf.redis_socket_timeout = config.CELERY_CONNECT_TIMEOUT


@app.task(bind=True, ignore_result=True)
def send_notification(self, channel, message):
    """
    Celery task to deliver a notification through the given channel.

    Delivery failures are logged and reported in the returned result; the task is never retried.

    Args:
        channel (str): The channel key, e.g. ``email``.
        message (dict): The ``recipient``, ``subject`` and ``body`` of the notification.
    """
    logger.info(f"{type(self)} -- Sending {channel} notification to {message['recipient']}")
    result = NotificationFactory.send(channel, message)
    if not result["success"]:
        logger.warning(f"{channel} notification to {message['recipient']} failed: {result['error']}")
    return result


def dispatch_notification(channel: str, message: NotificationMessage):
    """
    Queues a notification without waiting for it to be delivered.

    Raises:
        NotificationFailure: If the broker cannot accept the task.
    """
    try:
        send_notification.apply_async(args=(channel, message), retry=False)
    except (KombuError, OSError) as exc:
        raise NotificationFailure(f"Could not queue {channel} notification: {exc}") from exc
