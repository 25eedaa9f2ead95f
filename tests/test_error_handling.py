#!/usr/bin/env python3
"""
Error Handling Tests using Slash Testing Framework

Tests for fatal parse errors, their propagation through the reader and the
status values reported by the load_* methods.
"""

import logging
import tempfile
import slash
from pathlib import Path

import lxml.etree

from collada_module import ColladaReader, ColladaTarget
from collada_module.errors import (
    ColladaError,
    ColladaParseError,
    IllegalStateError,
    InvalidReferenceSyntaxError,
    MalformedValueError,
    MissingRequiredAttributeError,
)
from collada_module.logger import set_log_level

# Configure logging for tests
set_log_level(logging.CRITICAL)


@slash.fixture
def collada_reader():
    """Fixture providing a fresh ColladaReader instance"""
    return ColladaReader()


@slash.fixture
def temp_dir():
    """Fixture providing a temporary directory for test files"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


def wrap_geometry(mesh_content):
    return f"""<COLLADA version="1.5.0"><library_geometries><geometry id="g"><mesh>
{mesh_content}
</mesh></geometry></library_geometries></COLLADA>"""


def wrap_phong(shader_content):
    return f"""<COLLADA><library_effects><effect id="fx"><profile_COMMON>
<technique sid="common"><phong>{shader_content}</phong></technique>
</profile_COMMON></effect></library_effects></COLLADA>"""


def test_error_hierarchy():
    """Test that fatal parse errors share a base class"""
    for error_class in (MalformedValueError, MissingRequiredAttributeError, InvalidReferenceSyntaxError):
        assert issubclass(error_class, ColladaParseError)
        assert issubclass(error_class, ColladaError)
    assert not issubclass(IllegalStateError, ColladaParseError)


def test_error_messages():
    """Test the human readable messages"""
    error = MissingRequiredAttributeError('accessor', 'count')
    assert str(error) == "MissingRequiredAttributeError: <accessor> is missing required attribute 'count'"
    error = InvalidReferenceSyntaxError('#a b', 'illegal character')
    assert "'#a b'" in str(error)
    assert error.uri == '#a b'


def test_malformed_float_in_shader(collada_reader):
    """Test that an unparsable <float> aborts the parse"""
    with slash.assert_raises(MalformedValueError):
        collada_reader.parse_string(wrap_phong("<shininess><float>shiny</float></shininess>"))


def test_malformed_float_reports_status(collada_reader):
    """Test that load_from_string reports failure and keeps no document"""
    result = collada_reader.load_from_string(wrap_phong("<shininess><float>shiny</float></shininess>"))
    assert not result
    assert isinstance(collada_reader.last_error, MalformedValueError)
    with slash.assert_raises(IllegalStateError):
        collada_reader.get_document()


BAD_SHININESS = wrap_phong("<shininess><float>shiny</float></shininess>")


def test_fatal_error_surfaces_from_bytes_and_file(collada_reader, temp_dir):
    """Test that every lxml entry point raises the fatal error itself"""
    with slash.assert_raises(MalformedValueError):
        collada_reader.parse_bytes(BAD_SHININESS.encode('utf-8'))
    collada_reader.set_chunk_size(8)
    with slash.assert_raises(MalformedValueError):
        collada_reader.parse_bytes(BAD_SHININESS.encode('utf-8'))
    bad_file = temp_dir / "bad.dae"
    bad_file.write_text(BAD_SHININESS)
    with slash.assert_raises(MalformedValueError):
        collada_reader.parse_file(bad_file)


def test_fatal_error_reported_by_status_methods(collada_reader, temp_dir):
    """Test that last_error keeps the fatal error, not an incomplete document"""
    bad_file = temp_dir / "bad.dae"
    bad_file.write_text(BAD_SHININESS)
    assert not collada_reader.load_from_file(bad_file)
    assert isinstance(collada_reader.last_error, MalformedValueError)
    assert collada_reader.append_from_buffer(BAD_SHININESS.encode('utf-8')) == 1
    assert isinstance(collada_reader.last_error, MalformedValueError)
    assert not collada_reader.load_from_string(wrap_geometry('<triangles><p>0</p></triangles>'))
    assert isinstance(collada_reader.last_error, MissingRequiredAttributeError)


def test_target_keeps_first_error():
    """Test that the lxml target re-raises the first fatal error on close"""
    target = ColladaTarget()
    parser = lxml.etree.XMLParser(target=target)
    with slash.assert_raises(MalformedValueError):
        parser.feed(BAD_SHININESS)
        parser.close()
    assert isinstance(target.error, MalformedValueError)
    with slash.assert_raises(MalformedValueError):
        target.close()


def test_wide_primitive_indices(collada_reader):
    """Test that indices beyond 32 bits are kept"""
    document = collada_reader.parse_string(wrap_geometry('<triangles count="1"><p>0 1 3000000000</p></triangles>'))
    triangles = next(document.iter_geometries()).geometric.primitives[0]
    assert triangles.data.values.tolist() == [0, 1, 3000000000]


@slash.parametrize('mesh_content', [
    '<triangles count="1"><p>0 1 99999999999999999999</p></triangles>',
    '<source id="s"><int_array count="1">99999999999999999999</int_array></source>',
])
def test_integer_out_of_range(collada_reader, mesh_content):
    """Test that integers beyond 64 bits are malformed"""
    assert not collada_reader.load_from_string(wrap_geometry(mesh_content))
    assert isinstance(collada_reader.last_error, MalformedValueError)

def test_malformed_array_value(collada_reader):
    """Test a bad token inside a float_array"""
    with slash.assert_raises(MalformedValueError):
        collada_reader.parse_string(wrap_geometry(
            '<source id="s"><float_array count="3">1 2 x</float_array></source>'))


def test_array_longer_than_count(collada_reader):
    """Test that surplus array values are rejected"""
    with slash.assert_raises(MalformedValueError):
        collada_reader.parse_string(wrap_geometry(
            '<source id="s"><float_array count="2">1 2 3</float_array></source>'))


@slash.parametrize(('mesh_content', 'attribute'), [
    ('<source id="s"><float_array>1 2</float_array></source>', 'count'),
    ('<source id="s"><Name_array>a b</Name_array></source>', 'count'),
    ('<source id="s"><technique_common><accessor count="1"/></technique_common></source>', 'source'),
    ('<source id="s"><technique_common><accessor source="#s"/></technique_common></source>', 'count'),
    ('<triangles><p>0 1 2</p></triangles>', 'count'),
    ('<triangles count="1"><input semantic="VERTEX" source="#v"/></triangles>', 'offset'),
    ('<vertices id="v"><input source="#s"/></vertices>', 'semantic'),
])
def test_missing_required_attribute(collada_reader, mesh_content, attribute):
    """Test that missing required attributes fail fast"""
    with slash.assert_raises(MissingRequiredAttributeError) as caught:
        collada_reader.parse_string(wrap_geometry(mesh_content))
    assert caught.exception.attribute == attribute


def test_missing_effect_url(collada_reader):
    """Test that instance_effect requires url"""
    with slash.assert_raises(MissingRequiredAttributeError):
        collada_reader.parse_string(
            '<COLLADA><library_materials><material><instance_effect/></material></library_materials></COLLADA>')


@slash.parametrize('uri', ['#a b', 'tex%zz.png', '#a#b', '1http://host/x'])
def test_invalid_reference_syntax(collada_reader, uri):
    """Test that URI-valued attributes are checked while parsing"""
    with slash.assert_raises(InvalidReferenceSyntaxError) as caught:
        collada_reader.parse_string(wrap_geometry(
            f'<vertices id="v"><input semantic="POSITION" source="{uri}"/></vertices>'))
    assert caught.exception.uri == uri


def test_invalid_image_reference(collada_reader):
    """Test that an image <ref> is checked as a URI"""
    result = collada_reader.load_from_string(
        '<COLLADA><library_images><image><init_from><ref>my texture.png</ref></init_from></image>'
        '</library_images></COLLADA>')
    assert not result
    assert isinstance(collada_reader.last_error, InvalidReferenceSyntaxError)


def test_unknown_enum_value(collada_reader):
    """Test that an unknown up axis is malformed"""
    with slash.assert_raises(MalformedValueError):
        collada_reader.parse_string('<COLLADA><asset><up_axis>W_UP</up_axis></asset></COLLADA>')


def test_truncated_document(collada_reader):
    """Test that a stream that stops mid-document is reported"""
    result = collada_reader.append_from_buffer(b'<COLLADA><library_lights><light>')
    assert result == 1
    assert collada_reader.last_error is not None


def test_not_xml(collada_reader):
    """Test that non-XML input raises the parser's syntax error"""
    with slash.assert_raises(lxml.etree.XMLSyntaxError):
        collada_reader.parse_bytes(b'this is not a dae file')


def test_nonexistent_file(collada_reader):
    """Test loading a file that doesn't exist"""
    assert not collada_reader.load_from_file("definitely_does_not_exist.dae")
    assert isinstance(collada_reader.last_error, FileNotFoundError)


def test_empty_file(collada_reader, temp_dir):
    """Test loading an empty file"""
    empty_file = temp_dir / "empty.dae"
    empty_file.write_text("")
    assert not collada_reader.load_from_file(str(empty_file))


def test_failed_load_drops_previous_document(collada_reader):
    """Test that a failing load does not leave an older document behind"""
    assert collada_reader.load_from_string('<COLLADA/>')
    assert not collada_reader.load_from_string('<COLLADA><asset><up_axis>?</up_axis></asset></COLLADA>')
    with slash.assert_raises(IllegalStateError):
        collada_reader.get_document()


def test_unknown_elements_and_attributes_are_silent(collada_reader):
    """Test the forward compatibility policy"""
    document = collada_reader.parse_string(
        '<COLLADA future="yes"><library_force_fields/><library_lights vendor="x">'
        '<light id="l" exotic="1"><technique_common><hologram/>'
        '<directional><color>0 0 1</color><intensity>3</intensity></directional>'
        '</technique_common></light></library_lights></COLLADA>')
    light = next(document.iter_lights())
    assert light.source.color.blue == 1.0
