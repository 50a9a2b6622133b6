import json
import logging
import textwrap
import xml.dom
import xml.dom.minidom
from . import parse
from . import play as pplay


log = logging.getLogger(__name__)


FAILURE_TEXT = "The play generation failed due to a compilation error."
FAILURE_SIZE = 28


class Heading(object):

    _text = None
    text = property(lambda s: s._text)
    _size = None
    size = property(lambda s: s._size)
    _styled = False
    styled = property(lambda s: s._styled)
    _centered = False
    centered = property(lambda s: s._centered)

    def __init__(self,text,size,styled,centered):
        self._text = text
        self._size = size
        self._styled = styled
        self._centered = centered

    def __repr__(self):
        return "Heading(%s,%s,%s,%s)" % ( repr(self._text),repr(self._size),
            repr(self._styled),repr(self._centered) )

    def __eq__(self,other):
        return isinstance(other,Heading) and (self._text,self._size,
            self._styled,self._centered) == (other._text,other._size,
            other._styled,other._centered)


class PageBreak(object):

    def __repr__(self):
        return "PageBreak()"

    def __eq__(self,other):
        return isinstance(other,PageBreak)


class BlankLine(object):

    def __repr__(self):
        return "BlankLine()"

    def __eq__(self,other):
        return isinstance(other,BlankLine)


class SpeechRow(object):
    """Two-column row: speaker name on the left, speech on the right.
    A non-zero indent continues the line where the previous speech
    stopped."""

    _name = None
    name = property(lambda s: s._name)
    _name_style = None
    name_style = property(lambda s: s._name_style)
    _text = None
    text = property(lambda s: s._text)
    _text_style = None
    text_style = property(lambda s: s._text_style)
    _indent = 0.0
    indent = property(lambda s: s._indent)
    _size = None
    size = property(lambda s: s._size)

    def __init__(self,name,name_style,text,text_style,indent,size):
        self._name = name
        self._name_style = name_style
        self._text = text
        self._text_style = text_style
        self._indent = indent
        self._size = size

    def __repr__(self):
        return "SpeechRow(%s,%s,%s,%s,%s,%s)" % ( repr(self._name),
            repr(self._name_style),repr(self._text),repr(self._text_style),
            repr(self._indent),repr(self._size) )


class StyledLine(object):

    _text = None
    text = property(lambda s: s._text)
    _style = None
    style = property(lambda s: s._style)
    _spaced = False
    spaced = property(lambda s: s._spaced)
    _size = None
    size = property(lambda s: s._size)

    def __init__(self,text,style,spaced,size):
        self._text = text
        self._style = style
        self._spaced = spaced
        self._size = size

    def __repr__(self):
        return "StyledLine(%s,%s,%s,%s)" % ( repr(self._text),repr(self._style),
            repr(self._spaced),repr(self._size) )


class PlayDocument(object):

    _title = None
    title = property(lambda s: s._title)
    _author = None
    author = property(lambda s: s._author)
    _elements = None
    elements = property(lambda s: list(s._elements))
    _completed = False
    completed = property(lambda s: s._completed)
    _failure = None
    failure = property(lambda s: s._failure)

    def __init__(self,title,author,elements,completed=False,failure=None):
        self._title = title
        self._author = author
        self._elements = list(elements)
        self._completed = completed
        self._failure = failure

    def __repr__(self):
        return "PlayDocument(%s,%s,%s,%s,%s)" % ( repr(self._title),
            repr(self._author),repr(self._elements),repr(self._completed),
            repr(self._failure) )


class DocumentRenderer(object):
    """Receives the layout commands of a compilation and records them
    as the elements of a PlayDocument"""

    _closed = False
    closed = property(lambda s: s._closed)

    def __init__(self):
        self._title = None
        self._author = None
        self._elements = []
        self._completed = False
        self._failure = None
        self._closed = False

    @property
    def document(self):
        return PlayDocument(self._title,self._author,self._elements,
            self._completed,self._failure)

    def set_title(self,text):
        self._title = text

    def set_author(self,text):
        self._author = text

    def add_heading(self,text,size,styled,centered):
        self._elements.append(Heading(text,size,styled,centered))

    def add_page_break(self):
        self._elements.append(PageBreak())

    def add_blank_line(self):
        self._elements.append(BlankLine())

    def add_two_column_row(self,name_text,name_style,body_text,body_style,
            continuation_indent,size):
        self._elements.append(SpeechRow(name_text,name_style,body_text,
            body_style,continuation_indent,size))

    def add_styled_line(self,text,style,spacing_hint,size):
        self._elements.append(StyledLine(text,style,spacing_hint,size))

    def close_success(self):
        self._completed = True
        self._closed = True

    def close_with_failure_banner(self,message):
        log.debug("Discarding %d element(s) of failed play",len(self._elements))
        self._elements = [Heading(FAILURE_TEXT,FAILURE_SIZE,True,True)]
        self._completed = False
        self._failure = message
        self._closed = True


class PlayIO(object):

    EXTENSIONS = ["play"]

    @staticmethod
    def read(stream):
        return PlayIO.INST._read(stream)

    def _read(self,stream):
        renderer = DocumentRenderer()
        try:
            parse.compile_play(stream,renderer)
        except pplay.CompileError as e:
            e.document = renderer.document
            raise
        return renderer.document


PlayIO.INST = PlayIO()


class JsonIO(object):

    EXTENSIONS = ["json","js"]

    @staticmethod
    def write(document,stream):
        JsonIO.INST._write(document,stream)

    def _write(self,document,stream):
        obj = self._visit_PlayDocument(document)
        stream.write(json.dumps(obj, indent=4, sort_keys=True))

    def _visit(self,item):
        fname = "_visit_%s" % type(item).__name__
        return getattr(self,fname,lambda x: None)(item)

    def _visit_PlayDocument(self,doc):
        return { "title": doc.title, "author": doc.author,
                "completed": doc.completed, "failure": doc.failure,
                "elements": [self._visit(e) for e in doc.elements] }

    def _visit_Heading(self,heading):
        return { "type": "heading", "content": heading.text, "size": heading.size,
                "styled": heading.styled, "centered": heading.centered }

    def _visit_PageBreak(self,pbreak):
        return { "type": "pagebreak" }

    def _visit_BlankLine(self,blank):
        return { "type": "blankline" }

    def _visit_SpeechRow(self,row):
        return { "type": "speech", "name": row.name, "namestyle": row.name_style,
                "content": row.text, "style": row.text_style,
                "indent": row.indent, "size": row.size }

    def _visit_StyledLine(self,line):
        return { "type": "direction", "content": line.text, "style": line.style,
                "spaced": line.spaced, "size": line.size }


JsonIO.INST = JsonIO()


class MarkdownIO(object):

    EXTENSIONS = ["md","markdown"]
    LINE_WIDTH = 79
    # (smallest font size, heading level)
    LEVELS = ((24,1),(18,2),(13,3))

    @staticmethod
    def write(document,stream):
        MarkdownIO.INST._write(document,stream)

    def _write(self,document,stream):
        s = "\n".join(map(self._visit,document.elements))
        if document.failure is not None:
            s += "\n" + "".join(map(lambda l: "> %s\n" % l,
                textwrap.wrap(document.failure,MarkdownIO.LINE_WIDTH-2)))
        stream.write(s)

    def _visit(self,item):
        hname = "_visit_%s" % type(item).__name__.lower()
        return getattr(self,hname,self._visit_default)(item)

    def _visit_default(self,item):
        return ""

    def _emphasise(self,text,style):
        if style == pplay.BOLD:
            return "**%s**" % text
        if style == pplay.ITALIC:
            return "_%s_" % text
        return text

    def _wrap(self,text):
        return "".join(map(lambda l: "%s\n" % l,
            textwrap.wrap(text,MarkdownIO.LINE_WIDTH)))

    def _visit_heading(self,heading):
        if not heading.styled:
            return "_%s_\n" % heading.text
        level = 4
        for size,lvl in MarkdownIO.LEVELS:
            if heading.size >= size:
                level = lvl
                break
        return "%s %s\n" % ("#"*level,heading.text)

    def _visit_pagebreak(self,pbreak):
        return "---\n"

    def _visit_blankline(self,blank):
        return "<br>\n"

    def _visit_speechrow(self,row):
        if row.name:
            return self._wrap("%s %s" % (self._emphasise(row.name,row.name_style),
                self._emphasise(row.text,row.text_style)))
        return self._wrap(self._emphasise(row.text,row.text_style))

    def _visit_styledline(self,line):
        return self._wrap(self._emphasise(line.text,line.style))


MarkdownIO.INST = MarkdownIO()


class XmlIO(object):

    EXTENSIONS = ["xml"]

    @staticmethod
    def write(document,stream):
        XmlIO.INST._write(document,stream)

    def _write(self,document,stream):
        doc = xml.dom.minidom.getDOMImplementation().createDocument(None,None,None)
        self._append_to(self._visit_document(document,doc),doc)
        doc.writexml(stream,addindent=" "*4,newl="\n")

    def _textel(self,name,text,doc):
        el = doc.createElement(name)
        el.appendChild(doc.createTextNode(text))
        return el

    def _append_to(self,child,parent):
        if child and parent:
            parent.appendChild(child)

    def _flag(self,value):
        return "true" if value else "false"

    def _visit(self,item,doc):
        hname = "_visit_%s" % type(item).__name__.lower()
        return getattr(self,hname,self._visit_default)(item,doc)

    def _visit_default(self,item,doc):
        return None

    def _visit_document(self,document,doc):
        elPlay = doc.createElement("play")
        elPlay.setAttribute("completed",self._flag(document.completed))
        if document.title:
            self._append_to(self._textel("title",document.title,doc),elPlay)
        if document.author:
            self._append_to(self._textel("author",document.author,doc),elPlay)
        for element in document.elements:
            self._append_to(self._visit(element,doc),elPlay)
        if document.failure:
            self._append_to(self._textel("failure",document.failure,doc),elPlay)
        return elPlay

    def _visit_heading(self,heading,doc):
        el = self._textel("heading",heading.text,doc)
        el.setAttribute("size",str(heading.size))
        el.setAttribute("styled",self._flag(heading.styled))
        el.setAttribute("centered",self._flag(heading.centered))
        return el

    def _visit_pagebreak(self,pbreak,doc):
        return doc.createElement("pagebreak")

    def _visit_blankline(self,blank,doc):
        return doc.createElement("blankline")

    def _visit_speechrow(self,row,doc):
        elSpeech = doc.createElement("speech")
        elSpeech.setAttribute("size",str(row.size))
        if row.indent:
            elSpeech.setAttribute("indent","%.2f" % row.indent)
        if row.name:
            elName = self._textel("name",row.name,doc)
            elName.setAttribute("style",row.name_style)
            self._append_to(elName,elSpeech)
        elText = self._textel("text",row.text,doc)
        elText.setAttribute("style",row.text_style)
        self._append_to(elText,elSpeech)
        return elSpeech

    def _visit_styledline(self,line,doc):
        el = self._textel("direction",line.text,doc)
        el.setAttribute("style",line.style)
        el.setAttribute("size",str(line.size))
        el.setAttribute("spaced",self._flag(line.spaced))
        return el


XmlIO.INST = XmlIO()
