"""
Office Open XML Parser Package
==============================

This package turns Office Open XML documents (Office 2007 and later) into
the unified document model in ``office2pdf.ir``. Every format parser takes
the complete file as bytes and returns ``(Document, warnings)``.

Supported Formats
-----------------

.docx (Word 2007+):
    ``docx_parser.parse_docx`` walks ``word/document.xml`` and produces a
    single FlowPage: paragraphs, runs, tables with merged cells, lists,
    inline and floating images, charts, equations, footnotes, and the
    default header and footer of the final section.

.pptx (PowerPoint 2007+):
    ``pptx_parser.parse_pptx`` produces one FixedPage per slide: shapes,
    text boxes, pictures, tables, charts and SmartArt at absolute
    positions, plus the slide background.

.xlsx (Excel 2007+):
    ``xlsx_parser.parse_xlsx`` produces one TablePage per non-empty
    worksheet, applying cell styles, merges and conditional formatting.
    ``xlsx_parser.iter_xlsx_row_chunks`` streams large sheets in row chunks.

Sub-parsers
-----------
Parts shared by several formats have their own modules:

    chart.py        DrawingML chart parts (c:chartSpace)
    omml.py         Office Math (m:oMath) to math notation
    smartart.py     Diagram data parts (dgm:dataModel)
    cond_fmt.py     Spreadsheet conditional formatting evaluation

File Format Background
----------------------
Office Open XML (ISO/IEC 29500) stores a document as a ZIP archive of XML
parts linked by relationship files:

    document.docx/
    ├── [Content_Types].xml    # MIME types for parts
    ├── _rels/
    │   └── .rels              # Package relationships
    ├── docProps/
    │   └── core.xml           # Title, author, dates
    └── word/                  # (or ppt/, xl/)
        ├── document.xml       # Main content
        ├── _rels/document.xml.rels
        ├── styles.xml         # Style definitions
        └── media/             # Images

Error Handling
--------------
A package that cannot be opened at all (not a ZIP, password protected,
ZIP bomb, main part missing or malformed) raises a ``ParseError`` subclass.
Anything below that level degrades: the element is skipped and a
``ConversionWarning`` naming it is returned alongside the document.

Dependencies
------------
openpyxl: https://openpyxl.readthedocs.io/
    pip install openpyxl

    Provides:
    - Cell values (cached results with ``data_only=True``)
    - Fonts, fills, borders, alignment and merged ranges
    - Conditional formatting rules with differential styles
    - Read-only streaming worksheets

olefile: https://github.com/decalage2/olefile
    pip install olefile

    Provides:
    - Detection of password-protected packages, which are OLE2 compound
      files holding ``EncryptionInfo`` and ``EncryptedPackage`` streams

DOCX and PPTX parts are read with the standard library (zipfile and
xml.etree.ElementTree).
"""
