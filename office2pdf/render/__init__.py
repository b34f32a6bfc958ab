"""
Rendering: document model -> Typst markup -> PDF.

``typst_gen`` lowers a Document to markup plus image assets; ``backend``
compiles that markup to PDF bytes; ``font_subst`` maps proprietary Office
fonts to metric-compatible open fonts.
"""
