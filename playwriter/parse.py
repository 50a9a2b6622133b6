import logging
import re
from .play import (Counter, Play, PlayAction, CompileError, BlankInputError,
    InputError, GrammarError, ReservedName, PAGE_WIDTH, TOKEN_SEPARATOR, ARG_SEPARATOR,
    VALUE_SEPARATOR, CONTINUATION_START, SUBARGUMENT_START,
    STAGE_DIRECTION_START)


log = logging.getLogger(__name__)


def split_token(line,separator=TOKEN_SEPARATOR):
    """Splits off the text before the first separator. Returns the
    token and whatever follows the separator. Without a separator
    the whole line is the token and nothing remains."""
    index = line.find(separator)
    if index == -1:
        return line,""
    return line[:index].rstrip(),line[index+1:].lstrip()


class LineParser(object):
    """Holds the unread remainder of the current line"""

    _line = ""
    line = property(lambda s: s._line)

    def __init__(self,line=""):
        self.update(line)

    def update(self,line):
        self._line = line.strip()

    def is_consumed(self):
        return len(self._line) == 0

    def peek_first_token(self,separator=TOKEN_SEPARATOR):
        return split_token(self._line,separator)[0]

    def take_next_token(self,separator=TOKEN_SEPARATOR):
        token,self._line = split_token(self._line,separator)
        return token


class ArgumentPair(object):

    _key = None
    key = property(lambda s: s._key)
    _value = None
    value = property(lambda s: s._value)
    _index = -1
    index = property(lambda s: s._index)

    def __init__(self,key,value=None,index=-1):
        self._key = key
        self._value = value
        self._index = index

    def __repr__(self):
        return "ArgumentPair(%s,%s,%s)" % (
            repr(self._key),repr(self._value),repr(self._index) )

    @staticmethod
    def split(line,separator=ARG_SEPARATOR):
        index = line.find(separator)
        if index == -1:
            return ArgumentPair(line.strip().upper())
        return ArgumentPair(line[:index].strip().upper(),
            line[index+1:].lstrip(),index)


class FileParser(object):
    """Compiles the lines of a play script, one at a time, into calls
    on a Play. Stops at the first error."""

    WHITESPACE = re.compile(r"\s+")
    HEADERS = "'AUTHOR:', 'TITLE:', 'CHARACTERS:' or 'OPTIONS:'"
    SOLITARY = ("BEGIN","CURTAIN","NEWLINE","NEWPAGE")
    NUMBERED = ("ACT","SCENE")
    CUES = ("ENTER","EXIT")

    _play = None
    play = property(lambda s: s._play)
    _counter = None
    counter = property(lambda s: s._counter)

    def __init__(self,lines,renderer,page_width=PAGE_WIDTH):
        self._lines = iter(lines)
        self._counter = Counter()
        self._play = Play(renderer,self._counter,page_width)
        self._line_parser = LineParser()
        self._previous_name = None
        self._new_scene = False

    def _check(self,result,message,error=GrammarError):
        if not result:
            raise error(message,self._counter.line)

    def _next_line(self):
        try:
            for raw in self._lines:
                self._counter.increment()
                line = FileParser.WHITESPACE.sub(" ",raw.strip())
                if len(line) > 0:
                    self._line_parser.update(line)
                    return
        except (OSError,UnicodeError) as e:
            raise InputError("cannot read the play script (%s)" % e,
                self._counter.line+1) from e
        self._line_parser.update("")

    def parse_all(self):
        self._next_line()
        self._check(not self._line_parser.is_consumed(),"input file is blank",
            BlankInputError)
        self._parse_headers()
        while not self._line_parser.is_consumed():
            self._parse_line()
            self._next_line()
        self._play.finish()
        return self._play

    def _parse_headers(self):
        characters_set = False
        options_set = False

        while not self._line_parser.is_consumed():
            pair = ArgumentPair.split(self._line_parser.line)
            if pair.key == "BEGIN" and pair.value is None:
                return

            self._check(pair.value is not None,"can only set %s before the "
                "beginning of the play" % FileParser.HEADERS)

            if pair.key == "AUTHOR":
                self._play.set_author(pair.value)
                self._next_line()
            elif pair.key == "TITLE":
                self._play.set_title(pair.value)
                self._next_line()
            elif pair.key == "CHARACTERS":
                self._check(len(pair.value) == 0,"cannot set value on the same "
                    +"line for header 'CHARACTERS'")
                self._check(not characters_set,"cannot set multiple 'CHARACTERS' "
                    +"sections")
                characters_set = True
                self._parse_characters()
            elif pair.key == "OPTIONS":
                self._check(len(pair.value) == 0,"cannot set value on the same "
                    +"line for header 'OPTIONS'")
                self._check(not options_set,"cannot set multiple 'OPTIONS' sections")
                options_set = True
                self._parse_options()
            else:
                self._check(False,"can only set %s before the beginning of the "
                    "play" % FileParser.HEADERS)

    def _next_subargument(self):
        self._next_line()
        line = self._line_parser.line
        if len(line) == 0 or line[0] != SUBARGUMENT_START:
            return None
        self._line_parser.update(line[1:])
        return self._line_parser.line

    def _parse_characters(self):
        while True:
            line = self._next_subargument()
            if line is None:
                break
            pair = ArgumentPair.split(line)
            self._play.add_character(pair.key,pair.value)
        self._check(self._play.has_characters(),"no characters defined")

    def _parse_options(self):
        while True:
            line = self._next_subargument()
            if line is None:
                break
            self._check(len(line) > 0,"option line is empty")
            pair = ArgumentPair.split(line)
            self._play.set_option(pair.key,pair.value)

    def _parse_line(self):
        full_line = self._line_parser.line
        after_scene = self._new_scene
        self._new_scene = False

        if full_line[0] == STAGE_DIRECTION_START:
            self._play.write_stage_direction(full_line[1:].lstrip())
            return

        first = self._line_parser.take_next_token().upper()

        if first == "ONSTAGE":
            self._check(after_scene,"ONSTAGE can only be used after a new scene")
            self._check_arguments(first)
            self._play.perform(self._parse_targets(PlayAction.ONSTAGE))
            return

        if full_line.upper() == "THE END":
            self._play.end()
            return

        if first in FileParser.SOLITARY:
            self._check_alone(first)
            getattr(self,"_parse_%s" % first.lower())()
        elif first in FileParser.NUMBERED:
            self._check_arguments(first)
            pair = ArgumentPair.split(self._line_parser.line)
            getattr(self,"_parse_%s" % first.lower())(pair)
        elif first in FileParser.CUES:
            self._check_arguments(first)
            self._play.perform(self._parse_targets(first))
            self._previous_name = None
        else:
            self._parse_speech(first,full_line)

    def _parse_begin(self):
        self._play.begin()

    def _parse_curtain(self):
        self._play.curtain()

    def _parse_newline(self):
        self._play.new_line()

    def _parse_newpage(self):
        self._play.new_page()

    def _parse_act(self,pair):
        self._play.set_act(pair.key,pair.value)

    def _parse_scene(self,pair):
        self._previous_name = None
        self._play.set_scene(pair.key,pair.value)
        self._new_scene = True

    def _parse_targets(self,verb):
        """Reads "ALL", "ALL EXCEPT A, B" or "A, B" off the rest of the
        line and resolves the names"""
        self._play.check_inside_scene()
        lp = self._line_parser
        arg = lp.peek_first_token().upper()
        all_except = False
        characters = []

        if arg == "ALL":
            all_except = True
            lp.take_next_token()
            if lp.is_consumed():
                return PlayAction(verb,True,characters)
            arg = lp.take_next_token().upper()
            self._check(arg == "EXCEPT","can only use 'EXCEPT' after the 'ALL' keyword")
        else:
            self._check(arg != "EXCEPT","'EXCEPT' can only be used after the "
                +"'ALL' keyword")

        while not lp.is_consumed():
            name = lp.take_next_token(VALUE_SEPARATOR).upper()
            self._check(len(name) > 0,"cannot have blank spaces between '%s' "
                "characters" % VALUE_SEPARATOR)
            self._check(name not in ("ALL","EXCEPT"),("'%s' is a reserved keyword "
                +"that cannot be interpreted as a play character") % name,
                ReservedName)
            character = self._play.find_character(name)
            self._check(character not in characters,"character '%s' mentioned "
                "twice or more" % name)
            characters.append(character)

        if all_except:
            self._check(len(characters) > 0,"cannot use 'ALL EXCEPT' without "
                +"any character name")
        else:
            self._check(len(characters) > 0,"no characters set after the first keyword")
        return PlayAction(verb,all_except,characters)

    def _parse_speech(self,first,full_line):
        off_stage = False
        if first == "OFFSTAGE":
            self._check_arguments(first)
            full_line = self._line_parser.line
            off_stage = True

        colon = ArgumentPair.split(full_line,ARG_SEPARATOR)
        arrow = ArgumentPair.split(full_line,CONTINUATION_START)
        self._check(colon.value is not None or arrow.value is not None,
            ("line must either contain a '%s' or '%s' character to denote a "
            +"speech, or start by a '%s' character to denote a stage direction")
            % (ARG_SEPARATOR,CONTINUATION_START,STAGE_DIRECTION_START))

        if arrow.value is not None and (colon.value is None
                or arrow.index < colon.index):
            speech,continuation = arrow,True
        else:
            speech,continuation = colon,False

        if len(speech.key) == 0:
            self._check(self._previous_name is not None,("cannot use '%s' "
                +"without anything before as the first line of a scene or "
                +"after 'ENTER' or 'EXIT'") % ARG_SEPARATOR)
            character = self._play.find_character(self._previous_name)
            off_stage = not character.on_stage
        else:
            character = self._play.find_character(speech.key)

        self._check(len(speech.value) > 0,"cannot write empty speech for "
            "character %s" % character.name)

        if character.name == self._previous_name:
            self._play.write_speech(character,speech.value,off_stage,False,
                continuation)
            return

        self._play.write_speech(character,speech.value,off_stage,True,
            continuation)
        self._previous_name = character.name

    def _check_alone(self,keyword):
        self._check(self._line_parser.is_consumed(),
            "'%s' keyword has to be alone on its line" % keyword)

    def _check_arguments(self,keyword):
        self._check(not self._line_parser.is_consumed(),
            "cannot use '%s' keyword without any characters" % keyword)


def compile_play(lines,renderer,page_width=PAGE_WIDTH):
    """Compiles a whole play script into renderer commands. Closes the
    renderer either way; a CompileError is passed on to the caller
    once the renderer has been told about it."""
    parser = FileParser(lines,renderer,page_width)
    try:
        parser.parse_all()
    except CompileError as e:
        log.warning("Compilation failed: %s",e)
        renderer.close_with_failure_banner(str(e))
        raise
    renderer.close_success()
    log.info("Compiled %d line(s)",parser.counter.line)
    return parser.play
