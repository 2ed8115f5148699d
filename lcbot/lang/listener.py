"""Chat bot message listener. Connecting to the chat service, deciding which messages are addressed to the bot, and
sending replies belong to the bot framework: this module only turns the text of a message into the reply text.
"""

import re
import sys

from lcbot.lang.error import ErrorHandler
from lcbot.lang.session import Session
from lcbot.pure.reducer import NormalOrderReducer


class EvalListener:
    """Evaluates every message addressed to the bot as a lambda calculus statement. Each channel gets its own
    Session, so names bound with `let` in one channel are invisible in the others.
    """
    HELP = ("`λ`: send a lambda term, e.g. `(\\x y.x) a b`, and get its beta-normal form back. "
            "`let NAME = term` binds NAME for the rest of the conversation.")

    def __init__(self, limit=NormalOrderReducer.DEFAULT_LIMIT, stream=None):
        """limit is the reduction time budget per message, in seconds. Diagnostics go to stream (default stderr)."""
        self.limit = limit
        self.regex = re.compile(r".")
        self.error_handler = ErrorHandler(fatal=False, stream=stream if stream is not None else sys.stderr,
                                          plain=True)
        self.sessions = {}  # dict of channel: Session

    def help(self):
        return EvalListener.HELP

    def re(self):
        return self.regex

    def only_when_addressed(self):
        return True

    def session(self, channel):
        """Returns channel's Session, creating it on first use."""
        if channel not in self.sessions:
            path = f"#{channel}" if channel is not None else Session.SH_FILE
            self.sessions[channel] = Session(self.error_handler, path=path, limit=self.limit, cmd_line=True)
        return self.sessions[channel]

    def handle(self, text, channel=None):
        """Returns the reply to a message, or None if the message is blank or doesn't match self.re()."""
        if not text.strip() or not self.regex.search(text):
            return None
        return self.session(channel).evaluate(text)
