import collections
import logging
import re


log = logging.getLogger(__name__)


STAGE_DIRECTION_START = "*"
TOKEN_SEPARATOR = " "
ARG_SEPARATOR = ":"
VALUE_SEPARATOR = ","
CONTINUATION_START = ">"
SUBARGUMENT_START = "-"

KEYWORDS = frozenset([
    "ACT", "ALL", "ASGROUP", "BEGIN", "CURTAIN", "END",
    "ENTER", "EXCEPT", "EXEUNT", "EXIT", "NEWLINE",
    "NEWPAGE", "OFFSTAGE", "ONSTAGE", "SCENE",
    ARG_SEPARATOR, VALUE_SEPARATOR, STAGE_DIRECTION_START, CONTINUATION_START,
])

MIN_FONT_SIZE = 1
MAX_FONT_SIZE = 48
MIN_PADDING_SIZE = 3
MAX_PADDING_SIZE = 50

NORMAL = "normal"
BOLD = "bold"
ITALIC = "italic"

# A4 portrait less the default 36pt margins on each side
PAGE_WIDTH = 523.0

# average glyph advance of the Times family, as a fraction of the font size
GLYPH_WIDTHS = { NORMAL: 0.44, BOLD: 0.47, ITALIC: 0.42 }

OFFSTAGE_TEXT = " (offstage)"


def text_width(text,size,style=NORMAL):
    return len(text) * size * GLYPH_WIDTHS[style]


def join_names(names):
    """Joins names as "A", "A AND B", "A, B AND C" """
    names = list(names)
    if len(names) < 2:
        return "".join(names)
    return ", ".join(names[:-1]) + " AND " + names[-1]


def is_keyword(value):
    return value in KEYWORDS


class Counter(object):
    """Source line number of the line being compiled"""

    _line = 0
    line = property(lambda s: s._line)

    def __init__(self):
        self._line = 0

    def increment(self):
        self._line += 1


class CompileError(Exception):
    """Raised for any problem in the play script. Carries the line
    number that was being compiled when it was created."""

    _line = None
    line = property(lambda s: s._line)
    _message = None
    message = property(lambda s: s._message)
    # failure document, attached once the renderer has been closed
    document = None

    def __init__(self,message,line=None):
        self._message = message
        self._line = line
        Exception.__init__(self,"Error at line %s: %s." % (line,message))


class BlankInputError(CompileError):
    pass


class InputError(CompileError):
    """The line source itself failed: unreadable or badly encoded"""
    pass


class GrammarError(CompileError):
    pass


class CharacterError(CompileError):
    pass


class DuplicateCharacter(CharacterError):
    pass


class UnknownCharacter(CharacterError):
    pass


class ReservedName(CharacterError):
    pass


class OptionError(CompileError):
    pass


class StateError(CompileError):
    pass


class NumberingError(StateError):
    pass


class AlreadyOnStage(StateError):
    pass


class NotOnStage(StateError):
    pass


class WrongStageState(StateError):
    pass


class NoPriorSpeech(StateError):
    pass


def parse_unsigned(text,counter,minimum=None,maximum=None,error=OptionError):
    if re.match(r"[0-9]+$",text) is None:
        raise error("%s is not recognised as a non-negative number" % text,
            counter.line)
    value = int(text)
    if minimum is not None and maximum is not None \
            and (value < minimum or value > maximum):
        raise error("option value expect an integer from %d to %d"
            % (minimum,maximum), counter.line)
    return value


class Character(object):

    _name = None
    name = property(lambda s: s._name)
    _description = None
    description = property(lambda s: s._description)
    _on_stage = False
    on_stage = property(lambda s: s._on_stage)
    _counter = None

    def __init__(self,name,description=None,counter=None):
        self._name = name
        self._description = description if description is not None else ""
        self._on_stage = False
        self._counter = counter if counter is not None else Counter()

    def __repr__(self):
        return "Character(%s,%s)" % (repr(self._name),repr(self._description))

    def enter(self):
        if self._on_stage:
            raise AlreadyOnStage(("cannot make character %s enter as it is "
                +"already on stage") % self._name, self._counter.line)
        self._on_stage = True

    def exit(self):
        if not self._on_stage:
            raise NotOnStage(("cannot make character %s exit as it is "
                +"not on stage") % self._name, self._counter.line)
        self._on_stage = False

    def force_exit(self):
        self._on_stage = False


class PlayAction(collections.namedtuple("PlayAction","verb all_except characters")):
    """One ENTER, EXIT or ONSTAGE cue over already-resolved characters.
    With all_except set, the characters are the exceptions."""

    ENTER = "ENTER"
    EXIT = "EXIT"
    ONSTAGE = "ONSTAGE"

    __slots__ = ()

    def describe(self):
        names = [c.name for c in self.characters]
        if not self.all_except:
            return "%s %s" % (self.verb,join_names(names))
        if len(names) == 0:
            return "%s ALL" % self.verb
        return "%s ALL EXCEPT %s" % (self.verb,join_names(names))


class Play(object):
    """The play being compiled. Every mutator checks that the script
    is allowed to do what it asks, then passes the matching layout
    commands on to the renderer."""

    OPTIONS = {
        "TEXT SIZE": ("text_size",MIN_FONT_SIZE,MAX_FONT_SIZE),
        "SCENE SIZE": ("scene_size",MIN_FONT_SIZE,MAX_FONT_SIZE),
        "ACT SIZE": ("act_size",MIN_FONT_SIZE,MAX_FONT_SIZE),
        "AUTHOR SIZE": ("author_size",MIN_FONT_SIZE,MAX_FONT_SIZE),
        "TITLE SIZE": ("title_size",MIN_FONT_SIZE,MAX_FONT_SIZE),
        "SPEECH PADDING": ("speech_padding",MIN_PADDING_SIZE,MAX_PADDING_SIZE),
    }

    _title = ""
    title = property(lambda s: s._title)
    _author = ""
    author = property(lambda s: s._author)
    _characters = None
    characters = property(lambda s: list(s._characters.values()))

    text_size = 11
    scene_size = 13
    act_size = 18
    author_size = 15
    title_size = 24
    speech_padding = 6

    _has_begun = False
    has_begun = property(lambda s: s._has_begun)
    _has_ended = False
    has_ended = property(lambda s: s._has_ended)
    _outside_act = True
    outside_act = property(lambda s: s._outside_act)
    _outside_scene = True
    outside_scene = property(lambda s: s._outside_scene)
    _act_number = 0
    act_number = property(lambda s: s._act_number)
    _scene_number = 0
    scene_number = property(lambda s: s._scene_number)
    _has_talked = False
    _new_scene = False
    _padding = 0.0
    padding = property(lambda s: s._padding)
    _last_width = 0.0
    last_width = property(lambda s: s._last_width)

    def __init__(self,renderer,counter=None,page_width=PAGE_WIDTH):
        self._renderer = renderer
        self._counter = counter if counter is not None else Counter()
        self._page_width = page_width
        self._characters = collections.OrderedDict()
        self._modified_options = set()

    def _check(self,result,message,error=StateError):
        if not result:
            raise error(message,self._counter.line)

    def _check_between_begin_and_end(self):
        self._check(self._has_begun,"cannot write stage directions or dialog "
            +"before the 'BEGIN' keyword")
        self._check(not self._has_ended,"cannot write stage directions or dialog "
            +"after the 'END' keyword")

    def check_inside_scene(self):
        self._check_between_begin_and_end()
        self._check(not self._outside_scene,"cannot write stage directions "
            +"or dialog outside acts or scenes")

    def _check_description(self,kind,description):
        self._check(description is None or len(description) > 0,
            ("%s description cannot be empty (consider removing the '%s' "
            +"character if you don't want any description)")
            % (kind,ARG_SEPARATOR), GrammarError)

    def set_title(self,title):
        self._check(self._title == "","play title cannot be reset",GrammarError)
        self._check(len(title) > 0,"play title is empty",GrammarError)
        self._title = title

    def set_author(self,author):
        self._check(self._author == "","play author cannot be reset",GrammarError)
        self._check(len(author) > 0,"play author is empty",GrammarError)
        self._author = author

    def add_character(self,name,description=None):
        self._check(not self._has_begun,"cannot add a character after the "
            +"'BEGIN' keyword")
        self._check(len(name) > 0,"character name not found",GrammarError)
        self._check(not is_keyword(name),("cannot define character '%s' as "
            +"it is a special keyword") % name, ReservedName)
        self._check(name not in self._characters,
            "character '%s' has already been defined" % name, DuplicateCharacter)
        self._check(description is None or len(description) > 0,
            ("character description empty (consider removing the '%s' "
            +"character if you don't want any description)") % ARG_SEPARATOR,
            GrammarError)
        character = Character(name,description,self._counter)
        self._characters[name] = character
        log.debug("Character %s defined",name)
        return character

    def has_characters(self):
        return len(self._characters) > 0

    def find_character(self,name):
        character = self._characters.get(name)
        self._check(character is not None,"unknown character '%s'" % name,
            UnknownCharacter)
        return character

    def set_option(self,name,value):
        self._check(value is not None,"'%s' separator not found"
            % ARG_SEPARATOR, GrammarError)
        value = value.upper()
        self._check(len(name) > 0,"option name cannot be empty",OptionError)
        self._check(name not in self._modified_options,
            "cannot set two or more values for option '%s'" % name, OptionError)
        self._check(len(value) > 0,"option value cannot be empty",OptionError)
        self._check(name in Play.OPTIONS,"unknown option name '%s'" % name,
            OptionError)

        attr,minimum,maximum = Play.OPTIONS[name]
        setattr(self,attr,parse_unsigned(value,self._counter,minimum,maximum))
        self._modified_options.add(name)

    def begin(self):
        self._check(not self._has_ended,"cannot begin a play that has ended")
        self._check(not self._has_begun,"cannot use the 'BEGIN' keyword "
            +"twice or more")
        self._check(self._author != "" and self._title != "",
            "cannot begin a play with no title or author defined")
        self._check(self.has_characters(),"cannot begin a play with no "
            +"characters defined")
        self._has_begun = True

        self._renderer.set_title(self._title)
        self._renderer.set_author(self._author)
        self._renderer.add_heading(self._title,self.title_size,True,True)
        self._renderer.add_heading(self._author,self.author_size,False,True)
        self._renderer.add_page_break()

        for name in self._characters:
            size = (text_width(name,self.text_size,BOLD)
                + text_width(OFFSTAGE_TEXT,self.text_size,ITALIC))
            self._padding = max(self._padding,float(size))
        log.info("Play '%s' by %s begins",self._title,self._author)

    def _number_heading(self,kind,number,description):
        if description is None:
            return "%s %d" % (kind,number)
        return "%s %d: %s" % (kind,number,description)

    def set_act(self,number_text,description=None):
        self._check_between_begin_and_end()
        self._check(self._outside_act,("cannot start a new act before "
            +"ending act %d (use the 'CURTAIN' keyword for that)")
            % self._act_number)
        self._check(len(number_text) > 0,"act number cannot be empty",GrammarError)
        value = parse_unsigned(number_text,self._counter,error=NumberingError)
        if self._act_number > 0:
            message = "cannot switch from act number %d to act number %d" % (
                self._act_number,value)
        else:
            message = "first act must be number 1, not %d" % value
        self._check(self._act_number + 1 == value,message,NumberingError)
        self._check_description("act",description)

        self._act_number += 1
        self._scene_number = 0
        self._has_talked = False
        if self._act_number > 1:
            self._renderer.add_page_break()
        self._renderer.add_heading(self._number_heading("ACT",
            self._act_number,description),self.act_size,True,True)
        self._outside_act = False
        self._last_width = 0.0

    def set_scene(self,number_text,description=None):
        self._check_between_begin_and_end()
        self._check(not self._outside_act,"cannot define a new scene outside an act")
        self._check(self._outside_scene or self._has_talked,
            "cannot end a scene where characters didn't talk")
        self._check(len(number_text) > 0,"scene number cannot be empty",GrammarError)
        value = parse_unsigned(number_text,self._counter,error=NumberingError)
        if self._scene_number > 0:
            message = "cannot switch from scene number %d to scene number %d" % (
                self._scene_number,value)
        else:
            message = "first scene of each act must be number 1, not %d" % value
        self._check(self._scene_number + 1 == value,message,NumberingError)
        self._check_description("scene",description)

        self._scene_number += 1
        self._has_talked = False
        self._new_scene = True
        self._renderer.add_heading(self._number_heading("SCENE",
            self._scene_number,description),self.scene_size,True,True)
        self._outside_scene = False
        self._last_width = 0.0

    def perform(self,action):
        self.check_inside_scene()
        getattr(self,"_perform_%s" % action.verb.lower())(action)

    def _enter_all_except(self,action):
        excluded = set(c.name for c in action.characters)
        for c in action.characters:
            self._check(not c.on_stage,("cannot exclude character '%s' since "
                +"it has already entered") % c.name, AlreadyOnStage)
        for c in self.characters:
            if c.name not in excluded:
                c.enter()

    def _perform_enter(self,action):
        if action.all_except:
            self._enter_all_except(action)
        else:
            for c in action.characters:
                c.enter()
        self.write_stage_direction(action.describe())

    def _perform_exit(self,action):
        if action.all_except:
            excluded = set(c.name for c in action.characters)
            for c in action.characters:
                self._check(c.on_stage,("cannot exclude character '%s' since "
                    +"it has already exited") % c.name, NotOnStage)
            for c in self.characters:
                if c.name not in excluded:
                    c.exit()
        else:
            for c in action.characters:
                c.exit()
        self.write_stage_direction(action.describe())

    def _perform_onstage(self,action):
        if action.all_except:
            self._enter_all_except(action)
        else:
            for c in action.characters:
                c.enter()
        self.reset_width()

    def curtain(self):
        self.check_inside_scene()
        self._check(self._has_talked,"cannot end a scene where characters "
            +"didn't talk")
        self._has_talked = False
        self._renderer.add_styled_line("CURTAIN",NORMAL,True,self.text_size)
        for c in self.characters:
            c.force_exit()
        self._outside_act = True
        self._outside_scene = True
        self._last_width = 0.0

    def write_speech(self,character,text,off_stage,write_name,continuation):
        self.check_inside_scene()
        self._check(character.on_stage or off_stage,("cannot make character "
            +"'%s' speak as it is not onstage") % character.name, WrongStageState)
        self._check(not character.on_stage or not off_stage,("cannot make "
            +"character '%s' speak offstage as it is onstage") % character.name,
            WrongStageState)
        if not write_name:
            self._check(not continuation,("cannot use '%s' with same play "
                +"character as in the previous speech") % CONTINUATION_START,
                GrammarError)
        self._check(len(text) > 0,"cannot write empty speech for character %s"
            % character.name, GrammarError)

        column = max(self._page_width - self._padding,1.0)
        width = (text_width(text,self.text_size) + self.speech_padding) % column
        indent = 0.0
        if continuation:
            self._check(self._last_width > 0,"can only use '%s' after another speech"
                % CONTINUATION_START, NoPriorSpeech)
            indent = self._last_width
            width = (width + self._last_width) % column

        name = ""
        if write_name:
            name = character.name + (OFFSTAGE_TEXT if off_stage else "")
        self._renderer.add_two_column_row(name,BOLD,text,NORMAL,indent,
            self.text_size)
        self._has_talked = True
        self._last_width = width
        self._new_scene = False

    def write_stage_direction(self,text):
        self._check_between_begin_and_end()
        spaced = self._new_scene or self._last_width > 0
        self._renderer.add_styled_line(text,ITALIC,spaced,self.text_size)
        self._last_width = 0.0
        self._new_scene = False

    def new_line(self):
        self._renderer.add_blank_line()

    def new_page(self):
        self._renderer.add_page_break()

    def reset_width(self):
        self._last_width = 0.0

    def end(self):
        self._check(self._outside_act,"cannot end play without ending act "
            +"(use the 'CURTAIN' keyword for that)")
        self._check(self._has_begun,"cannot end a play that has not started")
        self._check(not self._has_ended,"cannot use the 'END' keyword twice or more")
        self._has_ended = True
        self._renderer.add_heading("THE END",self.text_size,True,True)
        log.info("Play '%s' ends after %d act(s)",self._title,self._act_number)

    def finish(self):
        self._check(self._has_begun,"cannot output a play that has not begun")
        self._check(self._has_ended,"cannot output a play that has not ended")
