#!/usr/bin/env python3

import begin
import argparse
import logging
import os.path
import sys
import re
from . import VERSION
from . import io as pio
from . import play as pplay


log = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Program successfully completed!"


class NoDefaultHelpFormatter(argparse.HelpFormatter):

    def _get_help_string(self, action):
        return re.sub(r'\(default:.*\)', '', action.help)


def _choice_validator(*choices):
    def validator(v):
        if v not in choices:
            raise ValueError("{} not in {}".format(v, choices))
        return v
    return validator


def _output_format(output,tofmt):
    ext = os.path.splitext(output)[1][1:] if output is not None else None

    if tofmt == "json" or (tofmt is None and ext in pio.JsonIO.EXTENSIONS):
        return pio.JsonIO
    elif tofmt == "xml" or (tofmt is None and ext in pio.XmlIO.EXTENSIONS):
        return pio.XmlIO
    return pio.MarkdownIO


def _output_stream(input,output,outformat):
    if output not in (None,"-"):
        return open(output, "w", encoding='utf-8')
    elif output == "-" or input in (None,"-"):
        return sys.stdout
    return open("%s.%s" % ( os.path.splitext(input)[0],
        outformat.EXTENSIONS[0] ), "w", encoding='utf-8')


def _notify(failure,outstream):
    if failure is not None:
        sys.exit(failure)
    print(SUCCESS_MESSAGE, file=sys.stderr if outstream is sys.stdout else sys.stdout)


@begin.start(
    formatter_class=NoDefaultHelpFormatter,
    env_prefix="PLAYWRITER_",
)
@begin.logging
@begin.convert(
    tofmt=_choice_validator("json","xml","markdown"),
)
def main(
        input: "Play script to read from or '-' (standard input)",
        output: "Output the result. A filename, or '-' (standard output)" =None,
        tofmt: "Output format. One of 'json', 'xml' or 'markdown'" =None,
    ):
    """Compiles PlayWriter stage play scripts"""

    log.debug("playwriter %s",".".join(map(str,VERSION)))

    # read from input stream
    if input not in (None, "-"):
        instream = open(input, "r", encoding='utf-8')
    else:
        instream = sys.stdin

    outformat = _output_format(output,tofmt)

    failure = None
    with instream:
        try:
            document = pio.PlayIO.read(instream)
        except pplay.CompileError as e:
            document = e.document
            failure = str(e)

    # a failed compilation still writes its failure document
    outstream = _output_stream(input,output,outformat)
    if outstream is sys.stdout:
        outformat.write(document,outstream)
    else:
        with outstream:
            outformat.write(document,outstream)

    _notify(failure,outstream)
