#!/usr/bin/env python3
"""
COLLADA Handler Tests using Slash Testing Framework

Event-level tests for the assembly engine: start/text/end events are
delivered directly, without an XML parser.
"""

import logging
import slash

from collada_module import ColladaHandler, ParserMode
from collada_module.errors import IllegalStateError, MalformedValueError
from collada_module.logger import set_log_level
from collada_module.structures import *

# Configure logging for tests
set_log_level(logging.WARNING)


@slash.fixture
def handler():
    """Fixture providing a fresh ColladaHandler instance"""
    return ColladaHandler()


def emit(handler, node):
    """
    Replay a nested (name, attributes, children) node as events.

    Children are either nested nodes or text fragments.
    """
    name, attributes, children = node
    handler.start_element(name, attributes)
    for child in children:
        if isinstance(child, str):
            handler.text(child)
        else:
            emit(handler, child)
    handler.end_element(name)


def document_of(handler, *libraries):
    emit(handler, ('COLLADA', {'version': '1.5.0'}, list(libraries)))
    return handler.get_document()


def ambient_light(light_id, color_text):
    return ('light', {'id': light_id}, [
        ('technique_common', {}, [
            ('ambient', {}, [
                ('color', {}, [color_text]),
            ]),
        ]),
    ])


def test_empty_stream(handler):
    """Test that a stream without a COLLADA root yields an empty document"""
    document = handler.get_document()
    assert document.is_empty()
    assert document.version is None


def test_minimal_document(handler):
    """Test an empty COLLADA element"""
    document = document_of(handler)
    assert document.version == '1.5.0'
    assert document.is_empty()
    assert handler.depth == 0


def test_incomplete_document(handler):
    """Test that requesting the document mid-stream is a usage error"""
    handler.start_element('COLLADA', {})
    handler.start_element('library_lights', {})
    assert handler.depth == 2
    with slash.assert_raises(IllegalStateError):
        handler.get_document()


def test_ambient_light_color(handler):
    """Test a light library with one ambient light"""
    document = document_of(handler, ('library_lights', {}, [ambient_light('sun', "1.0 0.5 0.25")]))
    assert len(document.light_libraries) == 1
    light = document.light_libraries[0].items[0]
    assert light.id == 'sun'
    assert isinstance(light.source, AmbientLightSource)
    assert light.source.color.red == 1.0
    assert light.source.color.green == 0.5
    assert light.source.color.blue == 0.25


def test_color_text_split_across_fragments(handler):
    """Test that text chunking inside a leaf does not change the value"""
    handler.start_element('COLLADA', {})
    handler.start_element('library_lights', {})
    handler.start_element('light', {})
    handler.start_element('technique_common', {})
    handler.start_element('directional', {})
    handler.start_element('color', {})
    for fragment in ("0", ".", "5 1", ".0", " 0.2", "5"):
        handler.text(fragment)
    for name in ('color', 'directional', 'technique_common', 'light', 'library_lights', 'COLLADA'):
        handler.end_element(name)
    light = next(handler.get_document().iter_lights())
    assert light.source.color == RGBColor(0.5, 1.0, 0.25)


def test_libraries_kept_in_document_order(handler):
    """Test that several libraries of a kind keep their order"""
    document = document_of(
        handler,
        ('library_lights', {'name': 'first'}, [ambient_light('a', "1 1 1")]),
        ('library_cameras', {'name': 'cams'}, []),
        ('library_lights', {'name': 'second'}, [ambient_light('b', "0 0 0"), ambient_light('c', "0 0 0")]),
    )
    assert [library.name for library in document.light_libraries] == ['first', 'second']
    assert [light.id for light in document.iter_lights()] == ['a', 'b', 'c']
    assert document.get_camera_count() == 0
    assert len(document.camera_libraries) == 1


def test_extra_subtree_is_skipped(handler):
    """Test that <extra> hides its whole subtree, including known names"""
    document = document_of(handler, ('library_lights', {}, [
        ('extra', {}, [
            ('light', {'id': 'hidden'}, []),
            ('extra', {}, []),
            ('light', {'id': 'still-hidden'}, []),
        ]),
        ambient_light('visible', "1 1 1"),
    ]))
    assert [light.id for light in document.iter_lights()] == ['visible']


def test_unknown_child_is_ignored(handler):
    """Test that a vendor element inside an effect changes nothing"""
    effect = ('effect', {'id': 'fx'}, [
        ('profile_COMMON', {}, [
            ('technique', {'sid': 'common'}, [
                ('lambert', {}, [
                    ('diffuse', {}, [('color', {}, ["0.5 0.5 0.5 1"])]),
                ]),
            ]),
        ]),
    ])
    plain = document_of(handler, ('library_effects', {}, [effect]))

    vendor = ColladaHandler()
    name, attributes, children = effect
    decorated = document_of(vendor, ('library_effects', {}, [
        (name, attributes, [('vendor_settings', {'mode': 'fast'}, [('float', {}, ["3"])])] + children),
    ]))
    assert plain == decorated


def test_mismatched_closing_tag_is_ignored(handler):
    """Test that a foreign closing tag does not pop the current mode"""
    handler.start_element('COLLADA', {})
    handler.start_element('library_lights', {})
    handler.end_element('library_cameras')
    assert handler.current_mode == ParserMode.LIBRARY_LIGHTS
    handler.end_element('library_lights')
    handler.end_element('COLLADA')
    assert handler.get_document().get_light_count() == 0


def test_known_limitation_nested_same_name_closes_early(handler):
    """
    Test the name-only closing rule.

    A <source> nested inside an unknown child of a mesh <source> is not
    recognized, but its closing tag still closes the outer source. The outer
    source therefore ends up without its array.
    """
    document = document_of(handler, ('library_geometries', {}, [
        ('geometry', {'id': 'g'}, [
            ('mesh', {}, [
                ('source', {'id': 'outer'}, [
                    ('vendor_wrapper', {}, [
                        ('source', {'id': 'inner'}, []),
                    ]),
                    ('float_array', {'count': '2'}, ["1 2"]),
                ]),
            ]),
        ]),
    ]))
    geometry = next(document.iter_geometries())
    sources = geometry.geometric.sources
    assert len(sources) == 1
    assert sources[0].id == 'outer'
    assert sources[0].array is None


def test_known_limitation_unknown_child_text_joins_leaf(handler):
    """
    Test that text of an unknown child of a leaf reaches the leaf.

    Unknown elements open no frame, so their text is fed to the innermost
    recognized builder and continues its last token.
    """
    document = document_of(handler, ('library_lights', {}, [
        ('light', {'id': 'l'}, [
            ('technique_common', {}, [
                ('directional', {}, [
                    ('color', {}, ["1 0.5 0.25", ('vendor', {}, ["9"])]),
                ]),
            ]),
        ]),
    ]))
    light = next(document.iter_lights())
    assert light.source.color == RGBColor(1.0, 0.5, 0.259)


def test_malformed_float_aborts(handler):
    """Test that a bad <float> fails immediately"""
    for name in ('COLLADA', 'library_effects', 'effect', 'profile_COMMON', 'technique', 'phong', 'shininess', 'float'):
        handler.start_element(name, {})
    handler.text("not-a-number")
    with slash.assert_raises(MalformedValueError):
        handler.end_element('float')
    with slash.assert_raises(IllegalStateError):
        handler.get_document()


def test_empty_shader_attribute(handler):
    """Test that an empty color-or-texture wrapper leaves the attribute unset"""
    document = document_of(handler, ('library_effects', {}, [
        ('effect', {}, [('profile_COMMON', {}, [('technique', {}, [
            ('blinn', {}, [('specular', {}, [])]),
        ])])]),
    ]))
    shader = next(document.iter_effects()).profiles[0].technique.shader
    assert isinstance(shader, BlinnShader)
    assert shader.specular is None


def test_text_outside_leaves_is_ignored(handler):
    """Test that whitespace between structural elements is harmless"""
    document = document_of(handler, "\n  ", ('library_lights', {}, ["\n    ", ambient_light('a', "1 1 1"), "\n"]), "\n")
    assert document.get_light_count() == 1
