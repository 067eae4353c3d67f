"""API error messages - complex multi-line errors only"""

from gac.utils import emsg


class APIErrors:
    """Complex API and connection error messages"""

    # === HTTP ERRORS ===
    HTTP_ERROR = "GPT4All error {status}: {body}"

    # === CONNECTION ERRORS ===
    CONNECTION_ERROR = "Failed to connect to {url}. Is GPT4All running and reachable? ({reason})"

    HTTP_TIMEOUT = """HTTP connection timeout reached ({timeout} seconds).
The connection to the model server timed out. This can happen with slow models.
Tip: Set HTTP_TIMEOUT=X to increase timeout (e.g., HTTP_TIMEOUT=600 for 10 minutes)"""

    CONNECTION_DROPPED = """Connection dropped by server while reading the reply ({reason}).
The partial reply above is incomplete. Please try your request again."""

    # === STREAMING ERRORS ===
    STREAM_NOT_SUPPORTED = """Server rejected streaming ({status}).
Retrying the request without streaming."""

    # === MODEL LISTING ===
    NO_MODELS = "No models found from GPT4All server."

    @classmethod
    def print(cls, template, **kwargs):
        """Print formatted error message"""
        emsg(cls.format(template, **kwargs))

    @classmethod
    def format(cls, template, **kwargs):
        """Get formatted error string"""
        try:
            return template.format(**kwargs)
        except KeyError as e:
            return f"Error: Missing parameter {e} in API error template"
        except (IndexError, ValueError) as e:
            return f"Error formatting API message: {e}"
