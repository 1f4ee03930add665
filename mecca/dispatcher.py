"""Token dispatch: the keyword table and the handlers behind it.

Every mutation a token can make (style, conditional stack, menu capture,
questionnaire log, flow-control signals) happens in this module. The driver in
:mod:`mecca.interpreter` only reacts to the signals left on the frame.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable, Dict, Optional

from . import ansi
from .errors import MeccaError
from .fields import FieldCursor, parse_int, split_fields
from .frame import RenderFrame
from .menu import is_valid_option_id
from .resources import decode_charset, decode_text
from .style import ATTRIBUTE_TOKENS, DEFAULT_STYLE, parse_color

if TYPE_CHECKING:
    from .interpreter import Interpreter

logger = logging.getLogger(__name__)

MORE_PROMPT = "More [Y,n,=]? "
ENTER_PROMPT = "Press ENTER to continue"
NO_READER = "no reader configured"

Handler = Callable[[RenderFrame, FieldCursor], None]

# Flow and input keywords that do nothing inside a hidden [color]/[nocolor]
# block, mapped to the number of fields they consume.
INACTIVE_WHEN_HIDDEN = {
    "display": 1,
    "link": 1,
    "onexit": 1,
    "goto": 1,
    "jump": 1,
    "top": 0,
    "quit": 0,
    "exit": 0,
    "option": 1,
    "menuwait": 0,
    "readln": 1,
    "enter": 0,
    "more": 0,
}


class TokenDispatcher:
    """Run the fields of one bracket against the keyword table, left to right."""

    def __init__(self, interpreter: "Interpreter") -> None:
        self.interpreter = interpreter
        self._handlers: Dict[str, Handler] = {
            # cursor and screen
            "cls": self._clear_screen,
            "cleos": self._control(ansi.CLEAR_TO_END_OF_SCREEN),
            "cleol": self._control(ansi.CLEAR_TO_END_OF_LINE),
            "up": self._control(ansi.cursor_up()),
            "down": self._control(ansi.cursor_down()),
            "left": self._control(ansi.cursor_backward()),
            "right": self._control(ansi.cursor_forward()),
            "cr": self._control(ansi.CARRIAGE_RETURN),
            "lf": self._control(ansi.CURSOR_NEXT_LINE),
            "savecursor": self._control(ansi.SAVE_CURSOR),
            "restorecursor": self._control(ansi.RESTORE_CURSOR),
            "locate": self._locate,
            "line": self._line,
            "box": self._box,
            # style
            "reset": self._reset,
            "save": self._save,
            "load": self._load,
            "fg": self._foreground,
            "bg": self._background,
            "on": self._on,
            # conditional display
            "color": self._show_if_color(True),
            "colour": self._show_if_color(True),
            "nocolor": self._show_if_color(False),
            "nocolour": self._show_if_color(False),
            "endcolor": self._end_color,
            "endcolour": self._end_color,
            # file composition
            "include": self._include,
            "ansi": self._ansi,
            "copy": self._ansi,
            "ansiconvert": self._ansi_convert,
            "display": self._display,
            "link": self._link,
            "onexit": self._on_exit,
            # flow control
            "label": self._label,
            "goto": self._goto,
            "jump": self._goto,
            "top": self._top,
            "quit": self._quit,
            "exit": self._exit,
            "choice": self._choice,
            "ifentered": self._if_entered,
            # interactive
            "menu": self._menu,
            "option": self._option,
            "menuwait": self._menu_wait,
            "readln": self._readln,
            "enter": self._enter,
            "more": self._more,
            "moreon": self._set_more(True),
            "moreoff": self._set_more(False),
            "ansopt": self._set_answers_optional(True),
            "ansreq": self._set_answers_optional(False),
            "store": self._store,
            "write": self._write,
            # misc
            "bell": self._control(ansi.BELL),
            "bs": self._control(ansi.BACKSPACE),
            "tab": self._control(ansi.TAB),
            "pause": self._pause,
            "repeat": self._repeat,
            "comment": self._comment,
        }
        for keyword, (attribute, value) in ATTRIBUTE_TOKENS.items():
            self._handlers[keyword] = self._attribute(attribute, value)

    def dispatch(self, frame: RenderFrame, content: str) -> None:
        fields = FieldCursor(split_fields(content))
        if not fields:
            # Nothing to interpret: show the bracket as typed.
            frame.emit(f"[{content}]", capture=True)
            return
        while fields and not frame.skip_line and not frame.halted:
            name = fields.next()
            keyword = name.lower()
            if frame.hidden and keyword in INACTIVE_WHEN_HIDDEN:
                fields.take(min(INACTIVE_WHEN_HIDDEN[keyword], fields.remaining()))
                continue
            handler = self._handlers.get(keyword)
            if handler is not None:
                handler(frame, fields)
            else:
                self._substitute(frame, name, fields)

    # ---------- Substitution ----------
    def _substitute(self, frame: RenderFrame, name: str, fields: FieldCursor) -> None:
        if name.startswith("/") and len(name) > 1:
            return

        color = parse_color(name)
        if color is not None:
            frame.set_style(frame.style.with_changes(foreground=color))
            if (fields.peek() or "").lower() == "on":
                background = parse_color(fields.peek(1))
                if background is not None:
                    fields.take(2)
                    frame.set_style(frame.style.with_changes(background=background))
            return

        literal = _literal_code(name)
        if literal is not None:
            frame.emit(literal, capture=True)
            return

        variables = frame.variables
        if variables and name in variables:
            frame.emit(str(variables[name]), capture=True)
            return

        token = self.interpreter.registry.lookup(name)
        if token is not None:
            args = []
            if token.arg_count > 0:
                args = fields.take(token.arg_count) or []
            frame.emit(token.invoke(args), capture=True)
            return

        logger.debug("Unrecognized token %r", name)
        frame.emit(f'[UNRECOGNIZED TOKEN "{name}"]')

    # ---------- Cursor and screen ----------
    @staticmethod
    def _control(sequence: str) -> Handler:
        def handler(frame: RenderFrame, fields: FieldCursor) -> None:
            frame.emit(sequence, styled=False)

        return handler

    def _clear_screen(self, frame: RenderFrame, fields: FieldCursor) -> None:
        frame.emit(ansi.CLEAR_SCREEN, styled=False)
        if not frame.hidden:
            frame.session.pagination.restart()

    def _locate(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(2)
        if args is None:
            return
        row, column = parse_int(args[0]), parse_int(args[1])
        if row is not None and column is not None:
            frame.emit(ansi.cursor_position(row + 1, column + 1), styled=False)

    def _line(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(2)
        if args is None:
            return
        length = parse_int(args[0])
        if length is not None and length > 0:
            frame.emit(args[1][0] * length)

    def _box(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(2)
        if args is None:
            return
        width, height = parse_int(args[0]), parse_int(args[1])
        if width is None or height is None:
            return
        for piece, drawing in ansi.draw_box(width, height):
            frame.emit(piece, styled=drawing)

    # ---------- Style ----------
    @staticmethod
    def _attribute(attribute: str, value: bool) -> Handler:
        def handler(frame: RenderFrame, fields: FieldCursor) -> None:
            frame.set_style(frame.style.with_changes(**{attribute: value}))

        return handler

    def _reset(self, frame: RenderFrame, fields: FieldCursor) -> None:
        frame.set_style(DEFAULT_STYLE)
        frame.session.menu.finish_option()

    def _save(self, frame: RenderFrame, fields: FieldCursor) -> None:
        if not frame.hidden:
            self.interpreter.style_stack.push(frame.style)

    def _load(self, frame: RenderFrame, fields: FieldCursor) -> None:
        if frame.hidden:
            return
        saved = self.interpreter.style_stack.pop()
        if saved is not None:
            frame.set_style(saved)

    def _foreground(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(1)
        color = parse_color(args[0]) if args else None
        if color is not None:
            frame.set_style(frame.style.with_changes(foreground=color))

    def _background(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(1)
        color = parse_color(args[0]) if args else None
        if color is not None:
            frame.set_style(frame.style.with_changes(background=color))

    def _on(self, frame: RenderFrame, fields: FieldCursor) -> None:
        if (fields.peek() or "").lower() == "exit" and fields.remaining() >= 2:
            fields.next()
            name = fields.next()
            if not frame.hidden:
                frame.on_exit_file = name
            return
        self._background(frame, fields)

    # ---------- Conditional display ----------
    def _show_if_color(self, wanted: bool) -> Handler:
        def handler(frame: RenderFrame, fields: FieldCursor) -> None:
            has_color = frame.session.color_system is not None
            frame.conditions.append(has_color != wanted)

        return handler

    def _end_color(self, frame: RenderFrame, fields: FieldCursor) -> None:
        if frame.conditions:
            frame.conditions.pop()

    # ---------- File composition ----------
    def _include(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(1)
        if args:
            self.interpreter.render_nested(frame, args[0])

    def _ansi(self, frame: RenderFrame, fields: FieldCursor) -> None:
        # UTF-8 only; bytes that do not decode show as U+FFFD. Code page art
        # needs [ansiconvert <file> cp437].
        args = fields.take(1)
        if not args:
            return
        data = self._read_resource(frame, args[0])
        if data is not None:
            frame.emit(decode_text(data), styled=False)

    def _ansi_convert(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(2)
        if args is None:
            return
        filename, charset = args
        data = self._read_resource(frame, filename)
        if data is None:
            return
        try:
            text = decode_charset(data, charset)
        except MeccaError as exc:
            frame.emit_error(str(exc))
            return
        frame.emit(text, styled=False)

    def _read_resource(self, frame: RenderFrame, name: str) -> Optional[bytes]:
        try:
            return self.interpreter.loader.read(name)
        except MeccaError as exc:
            logger.warning("Cannot load %s: %s", name, exc)
            frame.emit_error(str(exc))
            return None

    def _display(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(1)
        if args:
            frame.display_file = args[0]

    def _link(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(1)
        if args:
            frame.link_file = args[0]

    def _on_exit(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(1)
        if args:
            frame.on_exit_file = args[0]

    # ---------- Flow control ----------
    def _label(self, frame: RenderFrame, fields: FieldCursor) -> None:
        fields.take(1)

    def _goto(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(1)
        if args:
            frame.goto = args[0].lower()

    def _top(self, frame: RenderFrame, fields: FieldCursor) -> None:
        frame.top = True

    def _quit(self, frame: RenderFrame, fields: FieldCursor) -> None:
        frame.quit = True

    def _exit(self, frame: RenderFrame, fields: FieldCursor) -> None:
        frame.session.exit_requested = True
        self.interpreter.call_stack.clear()

    def _choice(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(1)
        if not args:
            return
        response = frame.session.menu.selected
        if not response:
            response = self.interpreter.readln_response[:1]
        if response.lower() != args[0].lower():
            frame.skip_line = True

    def _if_entered(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(1)
        if not args:
            return
        if self.interpreter.readln_response.lower() != args[0].lower():
            frame.skip_line = True

    # ---------- Interactive ----------
    def _menu(self, frame: RenderFrame, fields: FieldCursor) -> None:
        frame.session.menu.clear_options()

    def _option(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(1)
        if not args:
            return
        option_id = args[0]
        if not is_valid_option_id(option_id):
            frame.emit_error(
                f"invalid option_id {option_id}, must be single alphanumeric character"
            )
            return
        menu = frame.session.menu
        menu.finish_option()
        frame.emit(option_id.upper())
        menu.begin_option(option_id)

    def _menu_wait(self, frame: RenderFrame, fields: FieldCursor) -> None:
        reader = self.interpreter.reader
        if reader is None:
            frame.emit_error(NO_READER)
            return
        frame.session.output.flush()
        selected = frame.session.menu.select(reader.read_char())
        logger.debug("Menu selection: %r", selected)

    def _readln(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(1)
        description = args[0] if args else None
        reader = self.interpreter.reader
        if reader is None:
            frame.emit_error(NO_READER)
            return
        frame.session.output.flush()
        line = reader.read_line()
        response = line or ""
        self.interpreter.readln_response = response
        if line is not None or not self.interpreter.answers_optional:
            self.interpreter.questionnaire.record(response, description)

    def _enter(self, frame: RenderFrame, fields: FieldCursor) -> None:
        reader = self.interpreter.reader
        if reader is None:
            frame.emit_error(NO_READER)
            return
        frame.emit(ENTER_PROMPT)
        frame.session.output.flush()
        reader.read_line()

    def _more(self, frame: RenderFrame, fields: FieldCursor) -> None:
        if self.interpreter.reader is None:
            frame.emit_error(NO_READER)
            return
        self.more_prompt(frame)

    def more_prompt(self, frame: RenderFrame) -> None:
        """Show ``More [Y,n,=]?`` and act on the answer.

        ``y`` clears the screen and restarts the line count, ``=`` carries on,
        anything else quits the current file. End of input carries on.
        """

        session = frame.session
        pagination = session.pagination
        session.output.flush()
        session.output.append(MORE_PROMPT)
        session.output.flush()

        answer = self.interpreter.reader.read_char()
        pagination.last_prompted_line = pagination.current_line
        if answer is None:
            return
        answer = answer.lower()
        if answer == "y":
            session.output.append(ansi.CLEAR_SCREEN)
            pagination.restart()
        elif answer != "=":
            frame.quit = True

    def _set_more(self, enabled: bool) -> Handler:
        def handler(frame: RenderFrame, fields: FieldCursor) -> None:
            frame.session.pagination.enabled = enabled

        return handler

    def _set_answers_optional(self, optional: bool) -> Handler:
        def handler(frame: RenderFrame, fields: FieldCursor) -> None:
            self.interpreter.answers_optional = optional

        return handler

    def _store(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(1)
        selected = frame.session.menu.selected
        if selected:
            self.interpreter.questionnaire.record(selected, args[0] if args else None)

    def _write(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(1)
        if args:
            self.interpreter.questionnaire.record(args[0])

    # ---------- Misc ----------
    def _pause(self, frame: RenderFrame, fields: FieldCursor) -> None:
        frame.session.output.flush()
        delay = self.interpreter.settings.pause_seconds
        if delay > 0:
            time.sleep(delay)

    def _repeat(self, frame: RenderFrame, fields: FieldCursor) -> None:
        args = fields.take(1)
        if not args:
            return
        count = fields.take_int()
        if count is None:
            count = 1
        if count > 0:
            frame.emit(args[0][0] * count)

    def _comment(self, frame: RenderFrame, fields: FieldCursor) -> None:
        fields.drain()


def _literal_code(name: str) -> Optional[str]:
    """Decode ``65`` style decimal codes and ``U+2665`` style code points."""

    if name.isascii() and name.isdigit():
        code = parse_int(name)
        if code is None:
            return None
    elif len(name) > 2 and name[:2].upper() == "U+":
        try:
            code = int(name[2:], 16)
        except ValueError:
            return None
    else:
        return None
    try:
        return chr(code)
    except (ValueError, OverflowError):
        return None
