"""MECCA template interpreter.

Templates mix literal text with bracketed tokens such as ``[red]``,
``[locate 5 10]`` or ``[include menu.mec]``. The interpreter walks the text,
renders literal runs in the active style, hands each bracket to the
:class:`~mecca.dispatcher.TokenDispatcher` and then reacts to the flow-control
signals the bracket left behind (jumps, quit/exit, display/link files, more
prompts).

Usage::

    interpreter = Interpreter(template_root="templates", reader=sys.stdin)
    interpreter.register_token("user", lambda args: "Alice")
    interpreter.render_template("welcome.mec", {"node": 3})
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Any, List, Mapping, Optional, Sequence

from .dispatcher import TokenDispatcher
from .errors import MeccaError
from .frame import LinkSnapshot, Pagination, RenderFrame, RenderSession
from .menu import MenuState, QuestionnaireLog
from .registry import RegisteredToken, TokenFunc, TokenRegistry
from .resources import FileLoader, ResourceLoader, decode_text
from .scanner import next_span
from .settings import InterpreterSettings
from .streams import InputReader, OutputBuffer
from .style import StyleStack
from .terminal import TerminalCapabilities

logger = logging.getLogger(__name__)


class Interpreter:
    """Render MECCA templates to a terminal stream.

    One instance owns its token registry, menu and questionnaire state; it is
    not safe to drive the same instance from several threads at once.
    """

    def __init__(
        self,
        *,
        settings: Optional[InterpreterSettings] = None,
        template_root: Optional[str] = None,
        reader: Optional[IO[Any]] = None,
        writer: Optional[IO[str]] = None,
        terminal: Optional[TerminalCapabilities] = None,
        loader: Optional[ResourceLoader] = None,
    ) -> None:
        settings = settings.copy() if isinstance(settings, InterpreterSettings) else InterpreterSettings()
        if template_root is not None:
            settings.template_root = str(template_root)
        self.settings = settings.clamp()

        self.writer = writer if writer is not None else sys.stdout
        self.reader = InputReader(reader) if reader is not None else None
        self.loader = loader if loader is not None else FileLoader(self.settings.template_root)
        self.terminal = terminal or TerminalCapabilities.for_mode(self.settings.color, self.writer)

        self.registry = TokenRegistry()
        self.dispatcher = TokenDispatcher(self)
        self.style_stack = StyleStack()
        self.menu = MenuState()
        self.questionnaire = QuestionnaireLog()
        self.call_stack: List[LinkSnapshot] = []
        self.readln_response = ""
        self.answers_optional = self.settings.answers_optional
        self.pagination = Pagination(
            enabled=self.settings.more_prompts,
            height=self.settings.terminal_height or self.terminal.effective_height(),
        )

    # ---------- Public API ----------
    def register_token(self, name: str, func: TokenFunc, arg_count: int = 0) -> RegisteredToken:
        """Register ``[name]`` to be replaced by ``func(args)``.

        ``func`` receives exactly ``arg_count`` fields, or an empty list when
        the bracket has fewer left. Variables passed to a render call take
        precedence over registered tokens. Raises
        :class:`~mecca.errors.DuplicateTokenError` for a name already taken.
        """

        return self.registry.register(name, func, arg_count)

    def get_token(self, name: str) -> Optional[RegisteredToken]:
        return self.registry.lookup(name)

    def interpret(self, template: str, variables: Optional[Mapping[str, Any]] = None) -> str:
        """Render ``template`` and return the whole output as one string."""

        return self._execute(template, variables, (), streaming=False)

    def render_string(self, template: str, variables: Optional[Mapping[str, Any]] = None) -> None:
        """Render ``template`` to the writer, flushing before every prompt."""

        self._execute(template, variables, (), streaming=True)

    def exec_template(self, filename: str, variables: Optional[Mapping[str, Any]] = None) -> str:
        """Load ``filename`` from the template root and return its rendering.

        Unlike the file tokens, a missing file raises
        :class:`~mecca.errors.TemplateNotFoundError`.
        """

        template = decode_text(self.loader.read(filename))
        return self._execute(template, variables, (filename,), streaming=False)

    def render_template(self, filename: str, variables: Optional[Mapping[str, Any]] = None) -> None:
        template = decode_text(self.loader.read(filename))
        self._execute(template, variables, (filename,), streaming=True)

    def last_menu_selection(self) -> str:
        return self.menu.selected

    def last_readln_response(self) -> str:
        return self.readln_response

    def questionnaire_log(self) -> List[str]:
        return self.questionnaire.entries()

    def clear_questionnaire_log(self) -> None:
        self.questionnaire.clear()

    @property
    def more_enabled(self) -> bool:
        return self.pagination.enabled

    # ---------- Driver ----------
    def _execute(
        self,
        template: str,
        variables: Optional[Mapping[str, Any]],
        include_chain: Sequence[str],
        *,
        streaming: bool,
    ) -> str:
        self.style_stack.clear()
        self.menu.reset()
        self.call_stack.clear()
        self.readln_response = ""
        self.pagination.restart()

        session = RenderSession(
            output=OutputBuffer(self.writer, streaming=streaming),
            color_system=self.terminal.rich_color_system(),
            pagination=self.pagination,
            menu=self.menu,
        )
        frame = RenderFrame(template, variables or {}, tuple(include_chain), session)
        self._run(frame)

        if streaming:
            session.output.flush()
            return ""
        return session.output.take()

    def _run(self, frame: RenderFrame) -> None:
        text = frame.template
        session = frame.session

        while frame.position < len(text):
            span = next_span(text, frame.position)
            if span.literal:
                self._render_literal(frame, span.literal)
                if frame.halted:
                    break
            if span.token is None:
                frame.position = span.end
                continue

            self.dispatcher.dispatch(frame, span.token)

            if frame.skip_line:
                frame.skip_line = False
                newline = text.find("\n", span.end)
                if newline == -1:
                    break
                frame.position = newline + 1
                continue

            if self._more_due(frame):
                self.dispatcher.more_prompt(frame)

            if frame.halted:
                break

            if frame.display_file:
                name, frame.display_file = frame.display_file, None
                self.render_nested(frame, name)
                break

            if frame.link_file:
                name, frame.link_file = frame.link_file, None
                self._link(frame, name, span.end)
                if session.exit_requested:
                    break

            if frame.top:
                frame.top = False
                frame.goto = None
                frame.position = 0
                frame.rebuild_labels()
                continue

            if frame.goto:
                label, frame.goto = frame.goto, None
                target = frame.labels.get(label)
                if target is not None:
                    frame.position = target
                    continue
                logger.debug("Ignoring jump to unknown label %r", label)

            frame.position = span.end

        self.menu.finish_option()
        self._run_on_exit(frame)

    def _render_literal(self, frame: RenderFrame, literal: str) -> None:
        lines = literal.split("\n")
        last = len(lines) - 1
        for index, line in enumerate(lines):
            frame.emit(line, capture=True)
            if index == last:
                break
            if self._more_due(frame):
                self.dispatcher.more_prompt(frame)
                if frame.halted:
                    return
            frame.emit("\n", styled=False, capture=True)

    def _more_due(self, frame: RenderFrame) -> bool:
        return self.reader is not None and not frame.hidden and self.pagination.due()

    def render_nested(self, parent: RenderFrame, name: str) -> None:
        """Interpret file ``name`` inline for ``[include]``, ``[display]``, ``[link]``."""

        if name in parent.include_chain:
            parent.emit_error(f"{name} included recursively")
            return
        try:
            data = self.loader.read(name)
        except MeccaError as exc:
            logger.warning("Cannot load %s: %s", name, exc)
            parent.emit_error(str(exc))
            return

        child = RenderFrame(
            decode_text(data),
            parent.variables,
            parent.include_chain + (name,),
            parent.session,
            inherited_hidden=parent.hidden,
        )
        self._run(child)

    def _link(self, frame: RenderFrame, name: str, resume_at: int) -> None:
        depth = self.settings.max_link_depth
        if len(self.call_stack) >= depth:
            logger.debug("Refusing link to %s at depth %d", name, len(self.call_stack))
            frame.emit_error(f"link nesting too deep (max {depth} levels)")
            return

        self.call_stack.append(
            LinkSnapshot(
                template=frame.template,
                variables=frame.variables,
                include_chain=frame.include_chain,
                position=resume_at,
                style=frame.style,
                style_stack=self.style_stack.snapshot(),
            )
        )
        self.render_nested(frame, name)

        if not self.call_stack:
            # [exit] inside the linked file cleared the stack.
            return
        snapshot = self.call_stack.pop()
        frame.style = snapshot.style
        self.style_stack.restore(snapshot.style_stack)
        frame.position = snapshot.position

    def _run_on_exit(self, frame: RenderFrame) -> None:
        name, frame.on_exit_file = frame.on_exit_file, None
        if not name:
            return
        session = frame.session
        exiting = session.exit_requested
        session.exit_requested = False
        frame.quit = False
        self.render_nested(frame, name)
        session.exit_requested = exiting or session.exit_requested
