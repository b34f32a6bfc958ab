import unittest

from office2pdf.ir import SmartArtNode
from office2pdf.parsers.smartart import parse_smartart_data
from office2pdf.tests.ooxml_builders import A, DGM

tc = unittest.TestCase()


def _point(model_id: str, text: str = "", point_type: str = "") -> str:
    type_attr = f' type="{point_type}"' if point_type else ""
    body = f"<dgm:t><a:bodyPr/><a:p><a:r><a:t>{text}</a:t></a:r></a:p></dgm:t>" if text else ""
    return f'<dgm:pt modelId="{model_id}"{type_attr}>{body}</dgm:pt>'


def _connection(src: str, dest: str, cxn_type: str = "") -> str:
    type_attr = f' type="{cxn_type}"' if cxn_type else ""
    return f'<dgm:cxn modelId="c{src}{dest}" srcId="{src}" destId="{dest}"{type_attr}/>'


def _data_model(points: str, connections: str) -> str:
    return (
        f'<dgm:dataModel xmlns:dgm="{DGM}" xmlns:a="{A}">'
        f"<dgm:ptLst>{points}</dgm:ptLst><dgm:cxnLst>{connections}</dgm:cxnLst>"
        "</dgm:dataModel>"
    )


def test_parse_smartart_data_breadth_first() -> None:
    xml = _data_model(
        _point("0", point_type="doc")
        + _point("1", "Plan")
        + _point("2", "Build")
        + _point("3", "Test")
        + _point("9", "transition", point_type="sibTrans"),
        _connection("0", "1") + _connection("0", "2") + _connection("1", "3")
        # Presentation links never contribute structure
        + _connection("1", "9", "presOf"),
    )

    tc.assertListEqual(
        [
            SmartArtNode(text="Plan", depth=0),
            SmartArtNode(text="Build", depth=0),
            SmartArtNode(text="Test", depth=1),
        ],
        parse_smartart_data(xml),
    )


def test_parse_smartart_data_keeps_unconnected_points() -> None:
    xml = _data_model(
        _point("0", point_type="doc") + _point("1", "Linked") + _point("2", "Loose"),
        _connection("0", "1"),
    )

    tc.assertListEqual(
        [SmartArtNode(text="Linked", depth=0), SmartArtNode(text="Loose", depth=0)],
        parse_smartart_data(xml),
    )


def test_parse_smartart_data_empty_part() -> None:
    tc.assertListEqual([], parse_smartart_data(_data_model("", "")))
    tc.assertListEqual([], parse_smartart_data("<broken"))
