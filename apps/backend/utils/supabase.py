import os
from supabase import create_client, Client
from dotenv import load_dotenv
import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError

# Load environment variables
load_dotenv()

SUPABASE_URL = os.getenv("SUPABASE_URL")
# Service key bypasses RLS for catalog and history reads
SUPABASE_KEY = os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_KEY")

# Error fragments that mean the pooled connection is unusable
TRANSIENT_ERRORS = (
    "StreamReset",
    "UNEXPECTED_EOF_WHILE_READING",
    "EOF occurred in violation of protocol",
    "RemoteProtocolError",
    "ConnectionResetError",
    "ReadError",
)

_service_client = None


def get_supabase_client() -> Client:
    """
    Create and return the shared Supabase client.

    Raises:
        ValueError: If SUPABASE_URL or SUPABASE_KEY environment variables are not set
    """
    global _service_client

    if not SUPABASE_URL or not SUPABASE_KEY:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY environment variables must be set")

    if _service_client is None:
        _service_client = create_client(SUPABASE_URL, SUPABASE_KEY)

    return _service_client


def reset_supabase_client() -> None:
    """
    Drop the cached client so a fresh connection pool is created on next use.
    Recovers from HTTP/2 stream resets and SSL EOFs.
    """
    global _service_client
    _service_client = None
    logging.getLogger(__name__).info("Supabase client has been reset")


def perform_supabase_operation_with_retry(operation, description: str = "operation", max_attempts: int = 3, timeout_seconds: float = 8.0):
    """
    Execute a blocking Supabase SDK operation with timeout and retries.
    - Runs the callable in a thread to enforce a timeout.
    - Retries on transient transport errors and timeouts.

    Args:
        operation: Zero-arg callable that performs the Supabase request synchronously and returns the result
        description: Text description for logging
        max_attempts: Max number of attempts (including the first)
        timeout_seconds: Per-attempt timeout

    Returns:
        The operation's return value

    Raises:
        The last exception if all attempts fail
    """
    logger = logging.getLogger(__name__)
    last_error = None
    for attempt in range(1, max_attempts + 1):
        executor = ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(operation)
            return future.result(timeout=timeout_seconds)
        except FutureTimeoutError as e:
            last_error = e
            logger.warning(f"Supabase {description} timed out on attempt {attempt}/{max_attempts}")
            reset_supabase_client()
        except Exception as e:
            last_error = e
            message = str(e)
            logger.warning(f"Supabase {description} failed on attempt {attempt}/{max_attempts}: {message}")
            if any(err in message for err in TRANSIENT_ERRORS):
                reset_supabase_client()
        finally:
            # Do not wait on a hung call; its thread finishes in the background
            executor.shutdown(wait=False)
        if attempt < max_attempts:
            time.sleep(0.2 * (2 ** (attempt - 1)))
    raise last_error
