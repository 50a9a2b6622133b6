#!/usr/bin/env python3

import io
import json
import sys
import xml.dom.minidom
from unittest import mock
import unittest
import playwriter.io as pio
import playwriter.parse as pps
import playwriter.play as ppl
import playwriter.__main__ as pmain


HEADER = [
    "AUTHOR: J",
    "TITLE: T",
    "CHARACTERS:",
    "- ALICE",
    "- BOB",
    "BEGIN",
]


def compile_lines(lines):
    renderer = pio.DocumentRenderer()
    pps.compile_play(lines,renderer)
    return renderer.document


def speech_rows(document):
    return [e for e in document.elements if isinstance(e,pio.SpeechRow)]


def styled_lines(document):
    return [e for e in document.elements if isinstance(e,pio.StyledLine)]


class TestSplitToken(unittest.TestCase):

    def test_splits_on_first_separator(self):
        self.assertEqual(("ALL","EXCEPT BOB"), pps.split_token("ALL EXCEPT BOB"))

    def test_returns_whole_line_without_separator(self):
        self.assertEqual(("BOB",""), pps.split_token("BOB"))

    def test_trims_around_separator(self):
        self.assertEqual(("ALICE","BOB, CAROL"), pps.split_token("ALICE ,  BOB, CAROL",","))

    def test_empty_token_before_separator(self):
        self.assertEqual(("","BOB"), pps.split_token(",BOB",","))


class TestLineParser(unittest.TestCase):

    def test_starts_consumed(self):
        self.assertTrue(pps.LineParser().is_consumed())

    def test_update_strips(self):
        lp = pps.LineParser()
        lp.update("   ENTER ALICE  ")
        self.assertEqual("ENTER ALICE", lp.line)
        self.assertFalse(lp.is_consumed())

    def test_peek_does_not_consume(self):
        lp = pps.LineParser("ENTER ALICE")
        self.assertEqual("ENTER", lp.peek_first_token())
        self.assertEqual("ENTER", lp.peek_first_token())
        self.assertEqual("ENTER ALICE", lp.line)

    def test_peek_without_separator_returns_remainder(self):
        lp = pps.LineParser("CURTAIN")
        self.assertEqual("CURTAIN", lp.peek_first_token())

    def test_take_consumes_token_and_separator(self):
        lp = pps.LineParser("ENTER ALICE, BOB")
        self.assertEqual("ENTER", lp.take_next_token())
        self.assertEqual("ALICE, BOB", lp.line)
        self.assertEqual("ALICE", lp.take_next_token(","))
        self.assertEqual("BOB", lp.take_next_token(","))
        self.assertTrue(lp.is_consumed())

    def test_take_without_separator_empties(self):
        lp = pps.LineParser("CURTAIN")
        self.assertEqual("CURTAIN", lp.take_next_token())
        self.assertEqual("", lp.line)
        self.assertTrue(lp.is_consumed())


class TestArgumentPair(unittest.TestCase):

    def test_splits_key_and_value(self):
        p = pps.ArgumentPair.split("Title: The Tempest")
        self.assertEqual("TITLE", p.key)
        self.assertEqual("The Tempest", p.value)
        self.assertEqual(5, p.index)

    def test_no_separator(self):
        p = pps.ArgumentPair.split("begin")
        self.assertEqual("BEGIN", p.key)
        self.assertIsNone(p.value)
        self.assertEqual(-1, p.index)

    def test_empty_value_is_not_none(self):
        p = pps.ArgumentPair.split("characters:")
        self.assertEqual("CHARACTERS", p.key)
        self.assertEqual("", p.value)
        self.assertEqual(10, p.index)

    def test_key_trimmed_value_left_trimmed(self):
        p = pps.ArgumentPair.split("  lady macbeth  :   out, damned spot  ")
        self.assertEqual("LADY MACBETH", p.key)
        self.assertEqual("out, damned spot  ", p.value)

    def test_other_separator(self):
        p = pps.ArgumentPair.split("bob> and then: more",">")
        self.assertEqual("BOB", p.key)
        self.assertEqual("and then: more", p.value)
        self.assertEqual(3, p.index)

    def test_attributes_readonly(self):
        p = pps.ArgumentPair.split("a:b")
        with self.assertRaises(AttributeError):
            p.key = "C"


class TestCompileError(unittest.TestCase):

    def test_message_includes_line(self):
        e = ppl.CompileError("boom",3)
        self.assertEqual("Error at line 3: boom.", str(e))
        self.assertEqual(3, e.line)
        self.assertEqual("boom", e.message)

    def test_kinds_are_compile_errors(self):
        for kind in (ppl.BlankInputError, ppl.InputError, ppl.GrammarError,
                ppl.DuplicateCharacter, ppl.UnknownCharacter, ppl.ReservedName, ppl.OptionError,
                ppl.NumberingError, ppl.AlreadyOnStage, ppl.NotOnStage,
                ppl.WrongStageState, ppl.NoPriorSpeech):
            self.assertTrue(issubclass(kind,ppl.CompileError))

    def test_captures_counter_at_construction(self):
        counter = ppl.Counter()
        counter.increment()
        counter.increment()
        c = ppl.Character("ALICE",None,counter)
        with self.assertRaises(ppl.NotOnStage) as cm:
            c.exit()
        counter.increment()
        self.assertEqual(2, cm.exception.line)


class TestCounter(unittest.TestCase):

    def test_counts(self):
        c = ppl.Counter()
        self.assertEqual(0, c.line)
        c.increment()
        c.increment()
        self.assertEqual(2, c.line)


class TestJoinNames(unittest.TestCase):

    def test_single(self):
        self.assertEqual("ALICE", ppl.join_names(["ALICE"]))

    def test_two(self):
        self.assertEqual("ALICE AND BOB", ppl.join_names(["ALICE","BOB"]))

    def test_many(self):
        self.assertEqual("ALICE, BOB AND CAROL",
            ppl.join_names(["ALICE","BOB","CAROL"]))


class TestCharacter(unittest.TestCase):

    def test_defaults(self):
        c = ppl.Character("ALICE")
        self.assertEqual("ALICE", c.name)
        self.assertEqual("", c.description)
        self.assertFalse(c.on_stage)

    def test_enter_and_exit(self):
        c = ppl.Character("ALICE","a girl")
        c.enter()
        self.assertTrue(c.on_stage)
        c.exit()
        self.assertFalse(c.on_stage)

    def test_enter_twice_fails(self):
        c = ppl.Character("ALICE")
        c.enter()
        with self.assertRaises(ppl.AlreadyOnStage):
            c.enter()
        self.assertTrue(c.on_stage)

    def test_exit_offstage_fails(self):
        with self.assertRaises(ppl.NotOnStage):
            ppl.Character("ALICE").exit()

    def test_force_exit_is_unconditional(self):
        c = ppl.Character("ALICE")
        c.force_exit()
        self.assertFalse(c.on_stage)
        c.enter()
        c.force_exit()
        self.assertFalse(c.on_stage)

    def test_on_stage_not_writable(self):
        with self.assertRaises(AttributeError):
            ppl.Character("ALICE").on_stage = True


class TestPlayAction(unittest.TestCase):

    def chars(self,*names):
        return [ppl.Character(n) for n in names]

    def test_describe_some(self):
        a = ppl.PlayAction(ppl.PlayAction.ENTER,False,self.chars("ALICE","BOB","CAROL"))
        self.assertEqual("ENTER ALICE, BOB AND CAROL", a.describe())

    def test_describe_all(self):
        a = ppl.PlayAction(ppl.PlayAction.EXIT,True,[])
        self.assertEqual("EXIT ALL", a.describe())

    def test_describe_all_except(self):
        a = ppl.PlayAction(ppl.PlayAction.EXIT,True,self.chars("ALICE"))
        self.assertEqual("EXIT ALL EXCEPT ALICE", a.describe())
        a = ppl.PlayAction(ppl.PlayAction.ENTER,True,self.chars("ALICE","BOB"))
        self.assertEqual("ENTER ALL EXCEPT ALICE AND BOB", a.describe())


class TestPlay(unittest.TestCase):

    def setUp(self):
        self.renderer = mock.Mock()
        self.play = ppl.Play(self.renderer)

    def begin(self,*names):
        self.play.set_title("T")
        self.play.set_author("J")
        for n in names or ("ALICE","BOB"):
            self.play.add_character(n)
        self.play.begin()

    def open_scene(self):
        self.begin()
        self.play.set_act("1")
        self.play.set_scene("1")

    def action(self,verb,all_except,*names):
        return ppl.PlayAction(verb,all_except,
            [self.play.find_character(n) for n in names])

    def speak(self,name,text="Hello",off_stage=False,write_name=True,
            continuation=False):
        self.play.write_speech(self.play.find_character(name),text,off_stage,
            write_name,continuation)

    def run_act(self,number):
        self.play.set_act(str(number))
        self.play.set_scene("1")
        self.play.perform(self.action(ppl.PlayAction.ONSTAGE,False,"ALICE"))
        self.speak("ALICE")
        self.play.curtain()

    def test_add_then_find_returns_same_character(self):
        c = self.play.add_character("ALICE","a girl")
        self.assertIs(c, self.play.find_character("ALICE"))
        self.assertEqual("a girl", c.description)

    def test_add_duplicate_fails(self):
        self.play.add_character("ALICE")
        with self.assertRaises(ppl.DuplicateCharacter):
            self.play.add_character("ALICE","another")

    def test_add_keyword_fails(self):
        for name in ("ENTER","ALL","EXCEPT",":"):
            with self.assertRaises(ppl.ReservedName):
                self.play.add_character(name)

    def test_add_empty_name_fails(self):
        with self.assertRaises(ppl.GrammarError):
            self.play.add_character("")

    def test_add_empty_description_fails(self):
        with self.assertRaises(ppl.GrammarError):
            self.play.add_character("ALICE","")

    def test_add_after_begin_fails(self):
        self.begin()
        with self.assertRaises(ppl.StateError):
            self.play.add_character("CAROL")

    def test_find_unknown_fails(self):
        with self.assertRaises(ppl.UnknownCharacter):
            self.play.find_character("NOBODY")

    def test_title_set_once(self):
        self.play.set_title("T")
        with self.assertRaises(ppl.GrammarError):
            self.play.set_title("U")
        self.assertEqual("T", self.play.title)

    def test_empty_author_fails(self):
        with self.assertRaises(ppl.GrammarError):
            self.play.set_author("")

    def test_set_option(self):
        self.play.set_option("TEXT SIZE","12")
        self.play.set_option("SPEECH PADDING","50")
        self.assertEqual(12, self.play.text_size)
        self.assertEqual(50, self.play.speech_padding)

    def test_option_bounds(self):
        for name,value in (("TEXT SIZE","0"),("TITLE SIZE","49"),
                ("SPEECH PADDING","2"),("SPEECH PADDING","51")):
            with self.assertRaises(ppl.OptionError):
                self.play.set_option(name,value)

    def test_option_not_a_number(self):
        for value in ("abc","-3","1.5"):
            with self.assertRaises(ppl.OptionError):
                self.play.set_option("ACT SIZE",value)

    def test_option_set_twice_fails(self):
        self.play.set_option("ACT SIZE","20")
        with self.assertRaises(ppl.OptionError):
            self.play.set_option("ACT SIZE","21")

    def test_unknown_option_fails(self):
        with self.assertRaises(ppl.OptionError):
            self.play.set_option("FONT","Times")

    def test_option_without_value_fails(self):
        with self.assertRaises(ppl.GrammarError):
            self.play.set_option("ACT SIZE",None)

    def test_begin_requires_title_author_and_characters(self):
        with self.assertRaises(ppl.StateError):
            self.play.begin()
        self.play.set_title("T")
        self.play.set_author("J")
        with self.assertRaises(ppl.StateError):
            self.play.begin()
        self.play.add_character("ALICE")
        self.play.begin()
        self.assertTrue(self.play.has_begun)

    def test_begin_twice_fails(self):
        self.begin()
        with self.assertRaises(ppl.StateError):
            self.play.begin()

    def test_begin_renders_title_page(self):
        self.begin()
        self.renderer.set_title.assert_called_once_with("T")
        self.renderer.set_author.assert_called_once_with("J")
        self.assertEqual([mock.call("T",24,True,True),mock.call("J",15,False,True)],
            self.renderer.add_heading.call_args_list)
        self.renderer.add_page_break.assert_called_once_with()

    def test_begin_sizes_name_column(self):
        self.begin("AL","ALEXANDRA")
        expected = (ppl.text_width("ALEXANDRA",11,ppl.BOLD)
            + ppl.text_width(ppl.OFFSTAGE_TEXT,11,ppl.ITALIC))
        self.assertAlmostEqual(expected, self.play.padding)

    def test_acts_are_consecutive(self):
        self.begin()
        self.run_act(1)
        self.run_act(2)
        self.run_act(3)
        self.assertEqual(3, self.play.act_number)

    def test_wrong_act_number_leaves_counter(self):
        self.begin()
        for value in ("0","2","x"):
            with self.assertRaises(ppl.NumberingError):
                self.play.set_act(value)
            self.assertEqual(0, self.play.act_number)
        self.run_act(1)
        for value in ("1","3"):
            with self.assertRaises(ppl.NumberingError):
                self.play.set_act(value)
            self.assertEqual(1, self.play.act_number)

    def test_act_before_begin_fails(self):
        with self.assertRaises(ppl.StateError):
            self.play.set_act("1")

    def test_act_while_act_open_fails(self):
        self.open_scene()
        self.play.perform(self.action(ppl.PlayAction.ONSTAGE,False,"ALICE"))
        self.speak("ALICE")
        with self.assertRaises(ppl.StateError) as cm:
            self.play.set_act("2")
        self.assertNotIsInstance(cm.exception, ppl.NumberingError)

    def test_second_act_starts_on_new_page(self):
        self.begin()
        self.run_act(1)
        self.renderer.reset_mock()
        self.play.set_act("2","The return")
        self.renderer.add_page_break.assert_called_once_with()
        self.renderer.add_heading.assert_called_once_with("ACT 2: The return",18,True,True)

    def test_empty_act_description_fails(self):
        self.begin()
        with self.assertRaises(ppl.GrammarError):
            self.play.set_act("1","")

    def test_scene_outside_act_fails(self):
        self.begin()
        with self.assertRaises(ppl.StateError):
            self.play.set_scene("1")

    def test_scenes_reset_per_act(self):
        self.begin()
        self.run_act(1)
        self.play.set_act("2")
        self.assertEqual(0, self.play.scene_number)
        self.play.set_scene("1")
        self.assertEqual(1, self.play.scene_number)

    def test_scene_numbering(self):
        self.open_scene()
        self.play.perform(self.action(ppl.PlayAction.ONSTAGE,False,"ALICE"))
        self.speak("ALICE")
        with self.assertRaises(ppl.NumberingError):
            self.play.set_scene("3")
        self.play.set_scene("2","Later")
        self.renderer.add_heading.assert_called_with("SCENE 2: Later",13,True,True)

    def test_scene_without_speech_cannot_close(self):
        self.open_scene()
        with self.assertRaises(ppl.StateError):
            self.play.set_scene("2")
        with self.assertRaises(ppl.StateError):
            self.play.curtain()

    def test_curtain_outside_scene_fails(self):
        self.begin()
        with self.assertRaises(ppl.StateError):
            self.play.curtain()

    def test_curtain_clears_stage(self):
        self.open_scene()
        self.play.perform(self.action(ppl.PlayAction.ENTER,False,"ALICE"))
        self.speak("ALICE")
        self.play.curtain()
        for c in self.play.characters:
            self.assertFalse(c.on_stage)
        self.assertTrue(self.play.outside_act)
        self.assertTrue(self.play.outside_scene)
        self.renderer.add_styled_line.assert_called_with("CURTAIN",ppl.NORMAL,True,11)

    def test_enter_some(self):
        self.open_scene()
        self.play.perform(self.action(ppl.PlayAction.ENTER,False,"ALICE","BOB"))
        self.assertTrue(self.play.find_character("ALICE").on_stage)
        self.assertTrue(self.play.find_character("BOB").on_stage)
        self.renderer.add_styled_line.assert_called_with("ENTER ALICE AND BOB",
            ppl.ITALIC,True,11)

    def test_enter_some_already_on_stage(self):
        self.open_scene()
        self.play.perform(self.action(ppl.PlayAction.ENTER,False,"ALICE"))
        with self.assertRaises(ppl.AlreadyOnStage):
            self.play.perform(self.action(ppl.PlayAction.ENTER,False,"ALICE"))

    def test_enter_all(self):
        self.open_scene()
        self.play.perform(self.action(ppl.PlayAction.ENTER,True))
        self.assertTrue(all(c.on_stage for c in self.play.characters))
        self.renderer.add_styled_line.assert_called_with("ENTER ALL",ppl.ITALIC,True,11)

    def test_enter_all_except(self):
        self.begin("ALICE","BOB","CAROL")
        self.play.set_act("1")
        self.play.set_scene("1")
        self.play.perform(self.action(ppl.PlayAction.ENTER,True,"BOB"))
        self.assertEqual(["ALICE","CAROL"],
            [c.name for c in self.play.characters if c.on_stage])

    def test_enter_all_except_on_stage_exception_fails(self):
        self.open_scene()
        self.play.perform(self.action(ppl.PlayAction.ENTER,False,"ALICE"))
        with self.assertRaises(ppl.AlreadyOnStage):
            self.play.perform(self.action(ppl.PlayAction.ENTER,True,"ALICE"))

    def test_exit_some(self):
        self.open_scene()
        self.play.perform(self.action(ppl.PlayAction.ENTER,True))
        self.play.perform(self.action(ppl.PlayAction.EXIT,False,"BOB"))
        self.assertFalse(self.play.find_character("BOB").on_stage)
        self.renderer.add_styled_line.assert_called_with("EXIT BOB",ppl.ITALIC,False,11)

    def test_exit_off_stage_fails(self):
        self.open_scene()
        with self.assertRaises(ppl.NotOnStage):
            self.play.perform(self.action(ppl.PlayAction.EXIT,False,"BOB"))

    def test_enter_all_then_exit_all_except_keeps_exceptions(self):
        self.begin("ALICE","BOB","CAROL","DAVE")
        self.play.set_act("1")
        self.play.set_scene("1")
        self.play.perform(self.action(ppl.PlayAction.ENTER,True,"ALICE","CAROL"))
        self.play.perform(self.action(ppl.PlayAction.ENTER,False,"ALICE","CAROL"))
        self.play.perform(self.action(ppl.PlayAction.EXIT,True,"ALICE","CAROL"))
        self.assertEqual(["ALICE","CAROL"],
            [c.name for c in self.play.characters if c.on_stage])
        self.renderer.add_styled_line.assert_called_with(
            "EXIT ALL EXCEPT ALICE AND CAROL",ppl.ITALIC,False,11)

    def test_exit_all_except_needs_exceptions_on_stage(self):
        self.open_scene()
        self.play.perform(self.action(ppl.PlayAction.ENTER,True,"ALICE"))
        with self.assertRaises(ppl.NotOnStage):
            self.play.perform(self.action(ppl.PlayAction.EXIT,True,"ALICE"))

    def test_onstage_writes_nothing(self):
        self.open_scene()
        self.play.perform(self.action(ppl.PlayAction.ONSTAGE,True,"BOB"))
        self.assertTrue(self.play.find_character("ALICE").on_stage)
        self.assertFalse(self.play.find_character("BOB").on_stage)
        self.assertFalse(self.renderer.add_styled_line.called)
        self.assertEqual(0, self.play.last_width)

    def test_action_outside_scene_fails(self):
        self.begin()
        with self.assertRaises(ppl.StateError):
            self.play.perform(self.action(ppl.PlayAction.ENTER,False,"ALICE"))

    def test_speech_on_stage(self):
        self.open_scene()
        self.play.perform(self.action(ppl.PlayAction.ONSTAGE,False,"ALICE"))
        self.speak("ALICE","Hello")
        self.renderer.add_two_column_row.assert_called_once_with("ALICE",ppl.BOLD,
            "Hello",ppl.NORMAL,0.0,11)
        self.assertGreater(self.play.last_width, 0)

    def test_speech_requires_matching_stage_state(self):
        self.open_scene()
        with self.assertRaises(ppl.WrongStageState) as off:
            self.speak("ALICE",off_stage=False)
        self.play.perform(self.action(ppl.PlayAction.ONSTAGE,False,"ALICE"))
        with self.assertRaises(ppl.WrongStageState) as on:
            self.speak("ALICE",off_stage=True)
        self.assertNotEqual(str(off.exception), str(on.exception))

    def test_offstage_speech_annotates_name(self):
        self.open_scene()
        self.speak("BOB","Hi",off_stage=True)
        self.renderer.add_two_column_row.assert_called_once_with("BOB (offstage)",
            ppl.BOLD,"Hi",ppl.NORMAL,0.0,11)

    def test_speech_outside_scene_fails(self):
        self.begin()
        with self.assertRaises(ppl.StateError):
            self.speak("ALICE",off_stage=True)

    def test_empty_speech_fails(self):
        self.open_scene()
        with self.assertRaises(ppl.GrammarError):
            self.speak("ALICE","",off_stage=True)

    def test_continuation_indents_by_previous_width(self):
        self.open_scene()
        self.play.perform(self.action(ppl.PlayAction.ONSTAGE,True))
        self.speak("ALICE","Hello")
        width = self.play.last_width
        self.assertAlmostEqual(ppl.text_width("Hello",11) + 6, width)
        self.speak("BOB","there",continuation=True)
        args = self.renderer.add_two_column_row.call_args[0]
        self.assertEqual("BOB", args[0])
        self.assertAlmostEqual(width, args[4])
        self.assertAlmostEqual(width + ppl.text_width("there",11) + 6,
            self.play.last_width)

    def test_continuation_without_prior_speech_fails(self):
        self.open_scene()
        self.play.perform(self.action(ppl.PlayAction.ONSTAGE,False,"ALICE"))
        with self.assertRaises(ppl.NoPriorSpeech):
            self.speak("ALICE",continuation=True)

    def test_continuation_without_name_fails(self):
        self.open_scene()
        self.play.perform(self.action(ppl.PlayAction.ONSTAGE,False,"ALICE"))
        self.speak("ALICE")
        with self.assertRaises(ppl.GrammarError):
            self.speak("ALICE",write_name=False,continuation=True)

    def test_stage_direction_spacing(self):
        self.open_scene()
        self.play.write_stage_direction("Thunder")
        self.play.write_stage_direction("Lightning")
        self.play.perform(self.action(ppl.PlayAction.ONSTAGE,False,"ALICE"))
        self.speak("ALICE")
        self.play.write_stage_direction("Rain")
        self.assertEqual([mock.call("Thunder",ppl.ITALIC,True,11),
                mock.call("Lightning",ppl.ITALIC,False,11),
                mock.call("Rain",ppl.ITALIC,True,11)],
            self.renderer.add_styled_line.call_args_list)
        self.assertEqual(0, self.play.last_width)

    def test_stage_direction_before_begin_fails(self):
        with self.assertRaises(ppl.StateError):
            self.play.write_stage_direction("Thunder")

    def test_end_requires_closed_act(self):
        self.open_scene()
        with self.assertRaises(ppl.StateError):
            self.play.end()

    def test_end_once(self):
        self.begin()
        self.run_act(1)
        self.play.end()
        self.renderer.add_heading.assert_called_with("THE END",11,True,True)
        with self.assertRaises(ppl.StateError):
            self.play.end()
        with self.assertRaises(ppl.StateError):
            self.play.write_stage_direction("Applause")

    def test_end_before_begin_fails(self):
        with self.assertRaises(ppl.StateError):
            self.play.end()

    def test_finish(self):
        with self.assertRaises(ppl.StateError):
            self.play.finish()
        self.begin()
        with self.assertRaises(ppl.StateError):
            self.play.finish()
        self.play.end()
        self.play.finish()

    def test_new_line_and_page(self):
        self.play.new_line()
        self.play.new_page()
        self.renderer.add_blank_line.assert_called_once_with()
        self.renderer.add_page_break.assert_called_once_with()


class TestFileParser(unittest.TestCase):

    def assertFailsAt(self,kind,line,lines):
        with self.assertRaises(kind) as cm:
            compile_lines(lines)
        self.assertEqual(line, cm.exception.line)
        return cm.exception

    def test_scenario_succeeds(self):
        doc = compile_lines(HEADER+["ACT 1","SCENE 1","ONSTAGE ALICE, BOB",
            "ALICE: Hello","CURTAIN","THE END"])
        self.assertTrue(doc.completed)
        self.assertEqual("T", doc.title)
        self.assertEqual("J", doc.author)
        elements = doc.elements
        self.assertEqual(8, len(elements))
        self.assertEqual(pio.Heading("T",24,True,True), elements[0])
        self.assertEqual(pio.Heading("J",15,False,True), elements[1])
        self.assertEqual(pio.PageBreak(), elements[2])
        self.assertEqual(pio.Heading("ACT 1",18,True,True), elements[3])
        self.assertEqual(pio.Heading("SCENE 1",13,True,True), elements[4])
        self.assertEqual("ALICE", elements[5].name)
        self.assertEqual("Hello", elements[5].text)
        self.assertEqual(0.0, elements[5].indent)
        self.assertEqual("CURTAIN", elements[6].text)
        self.assertEqual(pio.Heading("THE END",11,True,True), elements[7])

    def test_scene_numbering_error_line(self):
        self.assertFailsAt(ppl.NumberingError,8,HEADER+["ACT 1","SCENE 2",
            "ONSTAGE ALICE, BOB","ALICE: Hello","CURTAIN","THE END"])

    def test_speech_before_entrance(self):
        self.assertFailsAt(ppl.WrongStageState,9,HEADER+["ACT 1","SCENE 1",
            "ALICE: Hello","CURTAIN","THE END"])

    def test_duplicate_character_line(self):
        self.assertFailsAt(ppl.DuplicateCharacter,5,["AUTHOR: J","TITLE: T",
            "CHARACTERS:","- ALICE","- ALICE","BEGIN"])

    def test_blank_input(self):
        self.assertFailsAt(ppl.BlankInputError,3,[""," ","\t\n"])
        self.assertFailsAt(ppl.BlankInputError,0,[])

    def test_blank_lines_are_counted(self):
        self.assertFailsAt(ppl.NumberingError,10,HEADER+["","ACT 1","","SCENE 2"])

    def test_raw_lines_are_normalised(self):
        doc = compile_lines(["  author:   J  \n","TITLE:\tT\n","characters:\n",
            "-   alice  \n","begin\n","act 1\n","scene 1\n","onstage   alice\n",
            "alice:   Hello     there   \n","curtain\n","the   end\n"])
        self.assertEqual("J", doc.author)
        self.assertEqual("Hello there", speech_rows(doc)[0].text)

    def test_missing_begin(self):
        self.assertFailsAt(ppl.StateError,5,HEADER[:5])

    def test_missing_end(self):
        self.assertFailsAt(ppl.StateError,11,HEADER+["ACT 1","SCENE 1",
            "ONSTAGE ALICE","ALICE: Hi","CURTAIN"])

    def test_unknown_header(self):
        self.assertFailsAt(ppl.GrammarError,2,["AUTHOR: J","FOO: bar"])

    def test_header_without_separator(self):
        self.assertFailsAt(ppl.GrammarError,1,["TITLE T"])

    def test_header_begin_with_arguments(self):
        self.assertFailsAt(ppl.GrammarError,6,HEADER[:5]+["BEGIN NOW"])

    def test_characters_value_on_same_line(self):
        self.assertFailsAt(ppl.GrammarError,1,["CHARACTERS: ALICE"])

    def test_characters_twice(self):
        self.assertFailsAt(ppl.GrammarError,4,["CHARACTERS:","- ALICE",
            "AUTHOR: J","CHARACTERS:","- BOB"])

    def test_no_characters(self):
        self.assertFailsAt(ppl.GrammarError,3,["AUTHOR: J","CHARACTERS:","BEGIN"])

    def test_character_descriptions(self):
        parser = pps.FileParser(["AUTHOR: J","TITLE: T","CHARACTERS:",
            "- Alice: a curious girl","- BOB","BEGIN","THE END"],mock.Mock())
        play = parser.parse_all()
        self.assertEqual("a curious girl", play.find_character("ALICE").description)
        self.assertEqual("", play.find_character("BOB").description)

    def test_character_empty_description(self):
        self.assertFailsAt(ppl.GrammarError,2,["CHARACTERS:","- ALICE:"])

    def test_character_reserved_name(self):
        self.assertFailsAt(ppl.ReservedName,2,["CHARACTERS:","- Enter"])

    def test_options(self):
        doc = compile_lines(["AUTHOR: J","TITLE: T","CHARACTERS:","- ALICE",
            "OPTIONS:","- text size: 12","- Title Size: 30","BEGIN","ACT 1",
            "SCENE 1","ONSTAGE ALICE","ALICE: Hi","CURTAIN","THE END"])
        self.assertEqual(pio.Heading("T",30,True,True), doc.elements[0])
        self.assertEqual(12, speech_rows(doc)[0].size)

    def test_option_errors(self):
        for option,kind in (("- TEXT SIZE: 0",ppl.OptionError),
                ("- TEXT SIZE: big",ppl.OptionError),
                ("- SPEECH PADDING: 51",ppl.OptionError),
                ("- COLOUR: 3",ppl.OptionError),
                ("- TEXT SIZE:",ppl.OptionError),
                ("- TEXT SIZE",ppl.GrammarError),
                ("-",ppl.GrammarError)):
            self.assertFailsAt(kind,2,["OPTIONS:",option])

    def test_option_set_twice(self):
        self.assertFailsAt(ppl.OptionError,3,["OPTIONS:","- ACT SIZE: 20",
            "- act size: 20"])

    def test_options_twice(self):
        self.assertFailsAt(ppl.GrammarError,3,["OPTIONS:","- ACT SIZE: 20",
            "OPTIONS:"])

    def test_keywords_are_case_insensitive(self):
        doc = compile_lines(HEADER+["act 1: Dawn","Scene 1","onstage all",
            "alice: Hi","Bob: Hello","exit all except alice","curtain","newline",
            "NewPage","The End"])
        self.assertTrue(doc.completed)
        self.assertIn(pio.Heading("ACT 1: Dawn",18,True,True), doc.elements)
        self.assertEqual("EXIT ALL EXCEPT ALICE", styled_lines(doc)[0].text)
        self.assertEqual(pio.BlankLine(), doc.elements[-3])
        self.assertEqual(pio.PageBreak(), doc.elements[-2])

    def test_solitary_keywords(self):
        for keyword in ("CURTAIN now","NEWLINE 2","NEWPAGE x"):
            self.assertFailsAt(ppl.GrammarError,11,HEADER+["ACT 1","SCENE 1",
                "ONSTAGE ALICE","ALICE: Hi",keyword])
        self.assertFailsAt(ppl.GrammarError,7,HEADER+["BEGIN again"])

    def test_begin_twice(self):
        self.assertFailsAt(ppl.StateError,7,HEADER+["BEGIN"])

    def test_keywords_need_arguments(self):
        for keyword in ("ACT","ENTER","EXIT"):
            self.assertFailsAt(ppl.GrammarError,7,HEADER+[keyword])

    def test_act_description(self):
        self.assertFailsAt(ppl.GrammarError,7,HEADER+["ACT 1:"])

    def test_second_act_without_curtain(self):
        self.assertFailsAt(ppl.StateError,11,HEADER+["ACT 1","SCENE 1",
            "ONSTAGE ALICE","ALICE: Hi","ACT 2"])

    def test_end_with_act_open(self):
        self.assertFailsAt(ppl.StateError,11,HEADER+["ACT 1","SCENE 1",
            "ONSTAGE ALICE","ALICE: Hi","THE END"])

    def test_two_acts(self):
        doc = compile_lines(HEADER+["ACT 1","SCENE 1","ONSTAGE ALICE","ALICE: Hi",
            "SCENE 2","ALICE: Still here","CURTAIN","ACT 2","SCENE 1",
            "ONSTAGE BOB","BOB: Bye","CURTAIN","THE END"])
        headings = [e.text for e in doc.elements if isinstance(e,pio.Heading)]
        self.assertEqual(["T","J","ACT 1","SCENE 1","SCENE 2","ACT 2","SCENE 1",
            "THE END"], headings)
        self.assertEqual(2, len([e for e in doc.elements if isinstance(e,pio.PageBreak)]))

    def test_characters_leave_at_curtain(self):
        self.assertFailsAt(ppl.WrongStageState,14,HEADER+["ACT 1","SCENE 1",
            "ONSTAGE ALICE","ALICE: Hi","CURTAIN","ACT 2","SCENE 1","ALICE: Hi"])

    def test_enter_and_exit_directions(self):
        doc = compile_lines(HEADER+["ACT 1","SCENE 1","ENTER ALICE, BOB",
            "ALICE: Hi","EXIT BOB","* She sighs","ALICE: Alone","ENTER BOB",
            "EXIT ALL","OFFSTAGE ALICE: Gone","CURTAIN","THE END"])
        self.assertEqual(["ENTER ALICE AND BOB","EXIT BOB","She sighs","ENTER BOB",
            "EXIT ALL","CURTAIN"], [l.text for l in styled_lines(doc)])

    def test_exit_all_needs_everyone_on_stage(self):
        self.assertFailsAt(ppl.NotOnStage,11,HEADER+["ACT 1","SCENE 1",
            "ONSTAGE ALICE","ALICE: Hi","EXIT ALL"])

    def test_onstage_only_after_scene(self):
        self.assertFailsAt(ppl.GrammarError,10,HEADER+["ACT 1","SCENE 1",
            "ENTER ALICE","ONSTAGE BOB"])
        self.assertFailsAt(ppl.GrammarError,10,HEADER+["ACT 1","SCENE 1",
            "* Night","ONSTAGE BOB"])
        self.assertFailsAt(ppl.GrammarError,9,HEADER+["ACT 1","SCENE 1","ONSTAGE"])

    def test_onstage_twice(self):
        self.assertFailsAt(ppl.GrammarError,10,HEADER+["ACT 1","SCENE 1",
            "ONSTAGE ALICE","ONSTAGE BOB"])

    def test_target_errors(self):
        for targets,kind in (("ALICE,,BOB",ppl.GrammarError),
                (", ALICE",ppl.GrammarError),
                ("ALICE, ALICE",ppl.GrammarError),
                ("EXCEPT ALICE",ppl.GrammarError),
                ("ALL ALICE",ppl.GrammarError),
                ("ALL EXCEPT",ppl.GrammarError),
                ("CAROL",ppl.UnknownCharacter),
                ("ALICE, ALL",ppl.ReservedName),
                ("ALL EXCEPT EXCEPT",ppl.ReservedName)):
            self.assertFailsAt(kind,9,HEADER+["ACT 1","SCENE 1","ENTER "+targets])

    def test_enter_outside_scene(self):
        self.assertFailsAt(ppl.StateError,7,HEADER+["ENTER ALICE"])

    def test_line_without_speech_marker(self):
        e = self.assertFailsAt(ppl.GrammarError,10,HEADER+["ACT 1","SCENE 1",
            "ONSTAGE ALICE","ALICE hello"])
        self.assertIn("stage direction", e.message)

    def test_unknown_speaker(self):
        self.assertFailsAt(ppl.UnknownCharacter,10,HEADER+["ACT 1","SCENE 1",
            "ONSTAGE ALICE","CAROL: hello"])

    def test_empty_speech(self):
        self.assertFailsAt(ppl.GrammarError,10,HEADER+["ACT 1","SCENE 1",
            "ONSTAGE ALICE","ALICE:"])

    def test_previous_speaker_continues(self):
        doc = compile_lines(HEADER+["ACT 1","SCENE 1","ONSTAGE ALICE","ALICE: Hi",
            ": and more","* aside","ALICE: again","CURTAIN","THE END"])
        self.assertEqual(["ALICE","",""], [r.name for r in speech_rows(doc)])

    def test_empty_name_needs_previous_speaker(self):
        self.assertFailsAt(ppl.GrammarError,10,HEADER+["ACT 1","SCENE 1",
            "ONSTAGE ALICE",": Hi"])
        self.assertFailsAt(ppl.GrammarError,12,HEADER+["ACT 1","SCENE 1",
            "ONSTAGE ALICE","ALICE: Hi","ENTER BOB",": Hi"])

    def test_empty_name_infers_offstage(self):
        doc = compile_lines(HEADER+["ACT 1","SCENE 1","ONSTAGE BOB",
            "OFFSTAGE ALICE: Hello?",": Anyone?","BOB: Yes","CURTAIN","THE END"])
        self.assertEqual(["ALICE (offstage)","","BOB"],
            [r.name for r in speech_rows(doc)])

    def test_offstage_speaker_on_stage(self):
        self.assertFailsAt(ppl.WrongStageState,10,HEADER+["ACT 1","SCENE 1",
            "ONSTAGE ALICE","OFFSTAGE ALICE: Hi"])

    def test_offstage_alone(self):
        self.assertFailsAt(ppl.GrammarError,10,HEADER+["ACT 1","SCENE 1",
            "ONSTAGE ALICE","OFFSTAGE"])

    def test_continuation_marker(self):
        doc = compile_lines(HEADER+["ACT 1","SCENE 1","ONSTAGE ALL",
            "ALICE: Shall we","BOB> go? Yes: now","ALICE: a > b","CURTAIN","THE END"])
        rows = speech_rows(doc)
        self.assertEqual(0.0, rows[0].indent)
        self.assertGreater(rows[1].indent, 0)
        self.assertEqual("go? Yes: now", rows[1].text)
        self.assertEqual("a > b", rows[2].text)
        self.assertEqual(0.0, rows[2].indent)

    def test_continuation_same_speaker(self):
        self.assertFailsAt(ppl.GrammarError,11,HEADER+["ACT 1","SCENE 1",
            "ONSTAGE ALICE","ALICE: Hi","ALICE> there"])

    def test_continuation_at_scene_start(self):
        self.assertFailsAt(ppl.NoPriorSpeech,10,HEADER+["ACT 1","SCENE 1",
            "ONSTAGE ALICE","ALICE> Hi"])

    def test_continuation_after_direction(self):
        self.assertFailsAt(ppl.NoPriorSpeech,12,HEADER+["ACT 1","SCENE 1",
            "ONSTAGE ALL","ALICE: Hi","* pause","BOB> there"])

    def test_stage_direction_text(self):
        doc = compile_lines(HEADER+["*   Before the curtain","ACT 1","SCENE 1",
            "ONSTAGE ALICE","ALICE: Hi","CURTAIN","THE END"])
        self.assertEqual("Before the curtain", styled_lines(doc)[0].text)

    def test_stage_direction_before_begin(self):
        self.assertFailsAt(ppl.GrammarError,3,["AUTHOR: J","TITLE: T","* rain"])

    def test_after_the_end(self):
        self.assertFailsAt(ppl.StateError,8,HEADER+["THE END","* applause"])
        self.assertFailsAt(ppl.StateError,8,HEADER+["THE END","THE END"])


class TestCompilePlay(unittest.TestCase):

    def test_success_closes_renderer(self):
        renderer = mock.Mock()
        play = pps.compile_play(HEADER+["THE END"],renderer)
        self.assertTrue(play.has_ended)
        renderer.close_success.assert_called_once_with()
        self.assertFalse(renderer.close_with_failure_banner.called)

    def test_failure_closes_with_banner(self):
        renderer = mock.Mock()
        with self.assertRaises(ppl.CompileError) as cm:
            pps.compile_play(HEADER+["ACT 2"],renderer)
        renderer.close_with_failure_banner.assert_called_once_with(str(cm.exception))
        self.assertFalse(renderer.close_success.called)
        self.assertEqual("Error at line 7: first act must be number 1, not 2.",
            str(cm.exception))

    def test_undecodable_input_closes_with_banner(self):
        def lines():
            yield "AUTHOR: J"
            raise UnicodeDecodeError("utf-8",b"\xff",0,1,"invalid start byte")
        renderer = pio.DocumentRenderer()
        with self.assertRaises(ppl.InputError) as cm:
            pps.compile_play(lines(),renderer)
        self.assertEqual(2, cm.exception.line)
        self.assertIsInstance(cm.exception.__cause__, UnicodeDecodeError)
        self.assertTrue(renderer.closed)
        self.assertEqual(str(cm.exception), renderer.document.failure)
        self.assertEqual([pio.Heading(pio.FAILURE_TEXT,pio.FAILURE_SIZE,True,True)],
            renderer.document.elements)

    def test_unreadable_input_closes_with_banner(self):
        def lines():
            yield "AUTHOR: J"
            yield ""
            raise OSError("device not ready")
        renderer = mock.Mock()
        with self.assertRaises(ppl.InputError) as cm:
            pps.compile_play(lines(),renderer)
        self.assertEqual(3, cm.exception.line)
        self.assertIn("device not ready", cm.exception.message)
        renderer.close_with_failure_banner.assert_called_once_with(str(cm.exception))
        self.assertFalse(renderer.close_success.called)


class TestDocumentRenderer(unittest.TestCase):

    def test_records_commands(self):
        r = pio.DocumentRenderer()
        r.set_title("T")
        r.set_author("J")
        r.add_heading("ACT 1",18,True,True)
        r.add_blank_line()
        r.add_two_column_row("ALICE",ppl.BOLD,"Hi",ppl.NORMAL,0.0,11)
        r.add_styled_line("ENTER BOB",ppl.ITALIC,True,11)
        r.add_page_break()
        r.close_success()
        doc = r.document
        self.assertTrue(r.closed)
        self.assertTrue(doc.completed)
        self.assertIsNone(doc.failure)
        self.assertEqual(["Heading","BlankLine","SpeechRow","StyledLine","PageBreak"],
            [type(e).__name__ for e in doc.elements])

    def test_failure_discards_elements(self):
        r = pio.DocumentRenderer()
        r.add_heading("ACT 1",18,True,True)
        r.close_with_failure_banner("Error at line 1: oops.")
        doc = r.document
        self.assertFalse(doc.completed)
        self.assertEqual("Error at line 1: oops.", doc.failure)
        self.assertEqual([pio.Heading(pio.FAILURE_TEXT,pio.FAILURE_SIZE,True,True)],
            doc.elements)

    def test_document_elements_immutable(self):
        r = pio.DocumentRenderer()
        r.add_page_break()
        doc = r.document
        doc.elements.append(pio.BlankLine())
        self.assertEqual(1, len(doc.elements))


SCRIPT = """TITLE: T
AUTHOR: J
CHARACTERS:
- ALICE
- BOB
BEGIN
ACT 1
SCENE 1
ONSTAGE ALICE
ALICE: Hello
ENTER BOB
CURTAIN
THE END
"""


class TestPlayIO(unittest.TestCase):

    def test_has_extensions(self):
        self.assertEqual("play", pio.PlayIO.EXTENSIONS[0])

    def test_read(self):
        doc = pio.PlayIO.read(io.StringIO(SCRIPT))
        self.assertTrue(doc.completed)
        self.assertEqual("T", doc.title)
        self.assertEqual(9, len(doc.elements))

    def test_read_failure_carries_document(self):
        with self.assertRaises(ppl.CompileError) as cm:
            pio.PlayIO.read(io.StringIO(SCRIPT.replace("SCENE 1","SCENE 3")))
        doc = cm.exception.document
        self.assertFalse(doc.completed)
        self.assertEqual(str(cm.exception), doc.failure)
        self.assertEqual(8, cm.exception.line)

    def test_read_bad_encoding_carries_document(self):
        stream = io.TextIOWrapper(io.BytesIO(b"AUTHOR: J\n\xff\xfe\n"),encoding="utf-8")
        with self.assertRaises(ppl.InputError) as cm:
            pio.PlayIO.read(stream)
        doc = cm.exception.document
        self.assertFalse(doc.completed)
        self.assertEqual(str(cm.exception), doc.failure)

    def test_error_has_no_document_until_read(self):
        self.assertIsNone(ppl.GrammarError("oops",1).document)


class TestJsonIO(unittest.TestCase):

    def test_has_extensions(self):
        pio.JsonIO.EXTENSIONS[0]

    def test_write_handles_empty_document(self):
        s = io.StringIO()
        pio.JsonIO.write(pio.PlayDocument(None,None,[]),s)
        self.assertEqual({"title": None, "author": None, "completed": False,
            "failure": None, "elements": []}, json.loads(s.getvalue()))

    def test_write_handles_elements(self):
        s = io.StringIO()
        pio.JsonIO.write(pio.PlayDocument("T","J",[
            pio.Heading("ACT 1",18,True,True),
            pio.PageBreak(),
            pio.BlankLine(),
            pio.SpeechRow("ALICE","bold","Hi","normal",0.0,11),
            pio.StyledLine("EXIT ALICE","italic",False,11) ],True),s)
        obj = json.loads(s.getvalue())
        self.assertTrue(obj["completed"])
        self.assertEqual([
            { "type": "heading", "content": "ACT 1", "size": 18,
                "styled": True, "centered": True },
            { "type": "pagebreak" },
            { "type": "blankline" },
            { "type": "speech", "name": "ALICE", "namestyle": "bold",
                "content": "Hi", "style": "normal", "indent": 0.0, "size": 11 },
            { "type": "direction", "content": "EXIT ALICE", "style": "italic",
                "spaced": False, "size": 11 } ], obj["elements"])

    def test_write_is_indented(self):
        s = io.StringIO()
        pio.JsonIO.write(pio.PlayDocument("T","J",[]),s)
        self.assertEqual('{\n'
                         '    "author": "J",\n'
                         '    "completed": false,\n'
                         '    "elements": [],\n'
                         '    "failure": null,\n'
                         '    "title": "T"\n'
                         '}', s.getvalue())


class TestMarkdownIO(unittest.TestCase):

    def test_has_extensions(self):
        pio.MarkdownIO.EXTENSIONS[0]

    def test_write_handles_empty_document(self):
        s = io.StringIO()
        pio.MarkdownIO.write(pio.PlayDocument(None,None,[]),s)
        self.assertEqual("", s.getvalue())

    def test_write_handles_elements(self):
        s = io.StringIO()
        pio.MarkdownIO.write(pio.PlayDocument("T","J",[
            pio.Heading("T",24,True,True),
            pio.Heading("J",15,False,True),
            pio.PageBreak(),
            pio.Heading("SCENE 1",13,True,True),
            pio.SpeechRow("ALICE","bold","Hello","normal",0.0,11),
            pio.SpeechRow("","bold","again","normal",0.0,11),
            pio.StyledLine("ENTER BOB","italic",True,11),
            pio.BlankLine(),
            pio.Heading("THE END",11,True,True) ],True),s)
        self.assertEqual("# T\n\n_J_\n\n---\n\n### SCENE 1\n\n**ALICE** Hello\n\n"
            "again\n\n_ENTER BOB_\n\n<br>\n\n#### THE END\n", s.getvalue())

    def test_write_wraps_speech(self):
        s = io.StringIO()
        pio.MarkdownIO.write(pio.PlayDocument("T","J",[
            pio.SpeechRow("ALICE","bold","This is a test to test line wrapping "
                +"and see if long lines are wrapped at some point","normal",0.0,11) ]),s)
        self.assertEqual("**ALICE** This is a test to test line wrapping and see "
            +"if long lines are\nwrapped at some point\n", s.getvalue())

    def test_write_handles_failure(self):
        s = io.StringIO()
        pio.MarkdownIO.write(pio.PlayDocument(None,None,[
            pio.Heading(pio.FAILURE_TEXT,pio.FAILURE_SIZE,True,True) ],False,
            "Error at line 1: oops."),s)
        self.assertEqual("# The play generation failed due to a compilation "
            +"error.\n\n> Error at line 1: oops.\n", s.getvalue())


class TestXmlIO(unittest.TestCase):

    def write(self,document):
        s = io.StringIO()
        pio.XmlIO.write(document,s)
        return xml.dom.minidom.parseString(s.getvalue()).documentElement

    def test_has_extensions(self):
        pio.XmlIO.EXTENSIONS[0]

    def test_write_handles_empty_document(self):
        root = self.write(pio.PlayDocument(None,None,[]))
        self.assertEqual("play", root.tagName)
        self.assertEqual("false", root.getAttribute("completed"))
        self.assertEqual([], root.getElementsByTagName("title"))

    def test_write_handles_elements(self):
        root = self.write(pio.PlayDocument("T","J",[
            pio.Heading("ACT 1",18,True,True),
            pio.PageBreak(),
            pio.BlankLine(),
            pio.SpeechRow("ALICE","bold","Hi","normal",0.0,11),
            pio.SpeechRow("BOB","bold","there","normal",30.2,11),
            pio.StyledLine("EXIT ALICE","italic",False,11) ],True))
        self.assertEqual("true", root.getAttribute("completed"))
        self.assertEqual("T", root.getElementsByTagName("title")[0].firstChild.data)
        heading = root.getElementsByTagName("heading")[0]
        self.assertEqual("ACT 1", heading.firstChild.data)
        self.assertEqual("18", heading.getAttribute("size"))
        self.assertEqual(1, len(root.getElementsByTagName("pagebreak")))
        self.assertEqual(1, len(root.getElementsByTagName("blankline")))
        speeches = root.getElementsByTagName("speech")
        self.assertEqual("", speeches[0].getAttribute("indent"))
        self.assertEqual("30.20", speeches[1].getAttribute("indent"))
        self.assertEqual("ALICE", speeches[0].getElementsByTagName("name")[0].firstChild.data)
        self.assertEqual("there", speeches[1].getElementsByTagName("text")[0].firstChild.data)
        direction = root.getElementsByTagName("direction")[0]
        self.assertEqual("EXIT ALICE", direction.firstChild.data)
        self.assertEqual("italic", direction.getAttribute("style"))
        self.assertEqual("false", direction.getAttribute("spaced"))

    def test_write_handles_failure(self):
        root = self.write(pio.PlayDocument(None,None,[],False,"Error at line 2: bad."))
        self.assertEqual("Error at line 2: bad.",
            root.getElementsByTagName("failure")[0].firstChild.data)


class TestMain(unittest.TestCase):

    def test_output_format_from_extension(self):
        self.assertIs(pio.JsonIO, pmain._output_format("out/hamlet.json",None))
        self.assertIs(pio.XmlIO, pmain._output_format("hamlet.xml",None))
        self.assertIs(pio.MarkdownIO, pmain._output_format("plays.json/hamlet",None))
        self.assertIs(pio.MarkdownIO, pmain._output_format(None,None))
        self.assertIs(pio.XmlIO, pmain._output_format("hamlet.json","xml"))

    def test_output_stream_replaces_extension(self):
        with mock.patch("builtins.open") as m:
            pmain._output_stream("plays/hamlet.play",None,pio.JsonIO)
        m.assert_called_once_with("plays/hamlet.json","w",encoding='utf-8')

    def test_output_stream_ignores_dots_in_directories(self):
        with mock.patch("builtins.open") as m:
            pmain._output_stream("plays.v2/hamlet",None,pio.MarkdownIO)
        m.assert_called_once_with("plays.v2/hamlet.md","w",encoding='utf-8')

    def test_output_stream_standard_output(self):
        self.assertIs(sys.stdout, pmain._output_stream("hamlet.play","-",pio.JsonIO))
        self.assertIs(sys.stdout, pmain._output_stream("-",None,pio.JsonIO))

    def test_notify_failure_exits_with_message(self):
        with self.assertRaises(SystemExit) as cm:
            pmain._notify("Error at line 8: bad.",io.StringIO())
        self.assertEqual("Error at line 8: bad.", cm.exception.code)

    def test_notify_success_to_stderr_when_output_is_stdout(self):
        with mock.patch("sys.stdout",new_callable=io.StringIO) as out, \
                mock.patch("sys.stderr",new_callable=io.StringIO) as err:
            pmain._notify(None,sys.stdout)
        self.assertEqual("", out.getvalue())
        self.assertEqual("Program successfully completed!\n", err.getvalue())

    def test_notify_success_to_stdout_when_output_is_file(self):
        with mock.patch("sys.stdout",new_callable=io.StringIO) as out, \
                mock.patch("sys.stderr",new_callable=io.StringIO) as err:
            pmain._notify(None,io.StringIO())
        self.assertEqual("Program successfully completed!\n", out.getvalue())
        self.assertEqual("", err.getvalue())


if __name__ == "__main__":
    unittest.main()
