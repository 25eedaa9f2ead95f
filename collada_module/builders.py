"""
Element Builders

One staging class per composite COLLADA construct. A builder is created when
its element opens (reading the element's attributes), absorbs the results of
its child elements through `attach` and produces one immutable value from
`build`, which the engine calls exactly once when the element closes.

Child results are routed by the mode of the child that produced them. Most
builders declare that routing as data: `SLOTS` maps a child mode to a single
valued field, `LISTS` maps a child mode to a list the result is appended to.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Type

import numpy

from .attributes import (
    Attributes,
    optional_int,
    parse_bool,
    parse_enum,
    parse_float,
    parse_uri,
    require,
    required_int,
    required_uri,
)
from .chunk_reader import ChunkFloatReader, ChunkIntReader, ChunkStringReader
from .errors import IllegalStateError, MalformedValueError
from .parser_mode import ParserMode
from .structures import *


class ElementBuilder:
    """Base class of all builders"""

    SLOTS: Dict[ParserMode, str] = {}
    LISTS: Dict[ParserMode, str] = {}

    def add_text(self, fragment: str):
        """Consume character data; structural builders ignore it"""
        pass

    def attach(self, mode: ParserMode, value: Any):
        """Absorb the finished result of a child element"""
        if mode in self.SLOTS:
            setattr(self, self.SLOTS[mode], value)
        elif mode in self.LISTS:
            getattr(self, self.LISTS[mode]).append(value)
        else:
            raise IllegalStateError(f"{type(self).__name__} cannot absorb a {mode.name} result")

    def build(self) -> Any:
        raise NotImplementedError


class ConstantBuilder(ElementBuilder):
    """Builder for attribute-only elements whose value is known on open"""

    def __init__(self, value: Any):
        self.value = value

    def build(self) -> Any:
        return self.value


class SlotBuilder(ElementBuilder):
    """
    Stages the single result of a choice wrapper.

    Used for elements like <diffuse> or <shininess> whose only job is to
    hand whichever variant their child produced to the enclosing builder.
    """

    def __init__(self):
        self.value = None

    def attach(self, mode: ParserMode, value: Any):
        self.value = value

    def build(self) -> Any:
        return self.value


# ---------------------------------------------------------------------------
# Text leaves
# ---------------------------------------------------------------------------

class TextBuilder(ElementBuilder):
    """Collects the character data of a leaf element"""

    def __init__(self, element: str = ''):
        self.element = element
        self._fragments: List[str] = []

    def add_text(self, fragment: str):
        self._fragments.append(fragment)

    @property
    def text(self) -> str:
        return ''.join(self._fragments).strip()

    def build(self) -> str:
        return self.text


class UriTextBuilder(TextBuilder):
    """Leaf whose text is a URI"""

    def build(self) -> str:
        return parse_uri(self.text)


class EnumTextBuilder(TextBuilder):
    """Leaf whose text is one member of an enum"""

    def __init__(self, element: str, enum_class: Type[Enum]):
        super().__init__(element)
        self.enum_class = enum_class

    def build(self) -> Enum:
        return parse_enum(self.enum_class, self.text, f"<{self.element}>")


class FloatValueBuilder(ElementBuilder):
    """Leaf holding exactly one float, with an optional sid"""

    def __init__(self, element: str, sid: Optional[str] = None):
        self.element = element
        self.sid = sid
        self._values: List[float] = []
        self._reader = ChunkFloatReader(self._values.append)

    @classmethod
    def from_attributes(cls, element: str, attributes: Attributes) -> 'FloatValueBuilder':
        return cls(element, attributes.get('sid'))

    def add_text(self, fragment: str):
        self._reader.feed(fragment)

    def _read_value(self) -> float:
        self._reader.finish()
        if len(self._values) != 1:
            raise MalformedValueError(
                f"<{self.element}> must hold exactly one float, found {len(self._values)}")
        return self._values[0]

    def build(self) -> FloatValue:
        return FloatValue(self._read_value(), self.sid)


class ShadingFloatBuilder(FloatValueBuilder):
    """<float> inside a float-or-param shader attribute"""

    def build(self) -> FloatAttribute:
        return FloatAttribute(value=super().build())


class FloatParamBuilder(FloatValueBuilder):
    """<float> inside a <newparam>"""

    def __init__(self):
        super().__init__('float')

    def build(self) -> FloatParam:
        return FloatParam(self._read_value())


class ColorBuilder(ElementBuilder):
    """
    Leaf holding a color.

    Light colors carry three components, shader colors four. Components
    beyond the expected number are ignored.
    """

    def __init__(self, components: int, sid: Optional[str] = None):
        self.components = components
        self.sid = sid
        self._values: List[float] = []
        self._reader = ChunkFloatReader(self._values.append)

    def add_text(self, fragment: str):
        self._reader.feed(fragment)

    def _read_components(self) -> List[float]:
        self._reader.finish()
        if len(self._values) < self.components:
            raise MalformedValueError(
                f"<color> needs {self.components} components, found {len(self._values)}")
        return self._values[:self.components]

    def build(self) -> RGBColor:
        red, green, blue = self._read_components()
        return RGBColor(red, green, blue, self.sid)


class ShadingColorBuilder(ColorBuilder):
    """<color> inside a color-or-texture shader attribute"""

    def __init__(self, sid: Optional[str] = None):
        super().__init__(4, sid)

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'ShadingColorBuilder':
        return cls(attributes.get('sid'))

    def build(self) -> ColorAttribute:
        red, green, blue, alpha = self._read_components()
        return ColorAttribute(color=RGBAColor(red, green, blue, alpha, self.sid))


# ---------------------------------------------------------------------------
# Document and libraries
# ---------------------------------------------------------------------------

class LibraryBuilder(ElementBuilder):
    """Stages the items of one library_* element"""

    LISTS = {
        ParserMode.IMAGE: 'items',
        ParserMode.MATERIAL: 'items',
        ParserMode.EFFECT: 'items',
        ParserMode.GEOMETRY: 'items',
        ParserMode.CAMERA: 'items',
        ParserMode.LIGHT: 'items',
    }

    def __init__(self, name: Optional[str] = None, id: Optional[str] = None):
        self.name = name
        self.id = id
        self.items: List[Any] = []

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'LibraryBuilder':
        return cls(attributes.get('name'), attributes.get('id'))

    def build(self) -> Library:
        return Library(name=self.name, id=self.id, items=tuple(self.items))


class DocumentBuilder(ElementBuilder):
    """
    Document assembly.

    Owns the library collections of the document while the COLLADA element
    is open; every closing library_* element is appended here in document
    order.
    """

    SLOTS = {
        ParserMode.ASSET: 'asset',
    }
    LISTS = {
        ParserMode.LIBRARY_IMAGES: 'image_libraries',
        ParserMode.LIBRARY_MATERIALS: 'material_libraries',
        ParserMode.LIBRARY_EFFECTS: 'effect_libraries',
        ParserMode.LIBRARY_GEOMETRIES: 'geometry_libraries',
        ParserMode.LIBRARY_CAMERAS: 'camera_libraries',
        ParserMode.LIBRARY_LIGHTS: 'light_libraries',
    }

    def __init__(self, version: Optional[str] = None):
        self.version = version
        self.asset: Optional[Asset] = None
        self.image_libraries: List[Library[Image]] = []
        self.material_libraries: List[Library[Material]] = []
        self.effect_libraries: List[Library[Effect]] = []
        self.geometry_libraries: List[Library[Geometry]] = []
        self.camera_libraries: List[Library[Camera]] = []
        self.light_libraries: List[Library[Light]] = []

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'DocumentBuilder':
        return cls(attributes.get('version'))

    def build(self) -> Document:
        return Document(
            version=self.version,
            asset=self.asset,
            image_libraries=tuple(self.image_libraries),
            material_libraries=tuple(self.material_libraries),
            effect_libraries=tuple(self.effect_libraries),
            geometry_libraries=tuple(self.geometry_libraries),
            camera_libraries=tuple(self.camera_libraries),
            light_libraries=tuple(self.light_libraries),
        )


class AssetBuilder(ElementBuilder):
    SLOTS = {
        ParserMode.ASSET_CREATED: 'created',
        ParserMode.ASSET_MODIFIED: 'modified',
        ParserMode.ASSET_TITLE: 'title',
        ParserMode.ASSET_UNIT: 'unit',
        ParserMode.ASSET_UP_AXIS: 'up_axis',
    }

    def __init__(self):
        self.created: Optional[str] = None
        self.modified: Optional[str] = None
        self.title: Optional[str] = None
        self.unit: Optional[Unit] = None
        self.up_axis: Optional[UpAxis] = None

    def build(self) -> Asset:
        unit = self.unit or Unit()
        return Asset(
            created=self.created,
            modified=self.modified,
            title=self.title,
            unit_name=unit.name,
            unit_meter=unit.meter,
            up_axis=self.up_axis or UpAxis.Y_UP,
        )


def unit_from_attributes(attributes: Attributes) -> ConstantBuilder:
    """<unit name meter> is attribute-only"""
    meter = attributes.get('meter')
    return ConstantBuilder(Unit(
        name=attributes.get('name', 'meter'),
        meter=1.0 if meter is None else parse_float(meter, "<unit meter>"),
    ))


# ---------------------------------------------------------------------------
# Images and materials
# ---------------------------------------------------------------------------

class ImageBuilder(ElementBuilder):
    SLOTS = {
        ParserMode.IMAGE_INIT_FROM: 'source',
    }

    def __init__(self, id: Optional[str] = None, name: Optional[str] = None,
                 sid: Optional[str] = None):
        self.id = id
        self.name = name
        self.sid = sid
        self.source: Optional[ImageSource] = None

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'ImageBuilder':
        return cls(attributes.get('id'), attributes.get('name'), attributes.get('sid'))

    def build(self) -> Image:
        return Image(id=self.id, name=self.name, sid=self.sid, source=self.source)


class ImageSourceBuilder(TextBuilder):
    """
    <init_from> of an image.

    COLLADA 1.5 wraps the URI in a <ref> child, COLLADA 1.4 puts it directly
    into the element text; both are accepted.
    """

    SLOTS = {
        ParserMode.IMAGE_INIT_FROM_REF: 'ref',
    }

    def __init__(self, generate_mips: bool = False):
        super().__init__('init_from')
        self.generate_mips = generate_mips
        self.ref: Optional[str] = None

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'ImageSourceBuilder':
        mips = attributes.get('mips_generate')
        return cls(False if mips is None else parse_bool(mips, "<init_from mips_generate>"))

    def build(self) -> ImageSource:
        ref = self.ref
        if ref is None and self.text:
            ref = parse_uri(self.text)
        return ImageSource(ref=ref, generate_mips=self.generate_mips)


class MaterialBuilder(ElementBuilder):
    SLOTS = {
        ParserMode.INSTANCE_EFFECT: 'effect_instance',
    }

    def __init__(self, id: Optional[str] = None, name: Optional[str] = None):
        self.id = id
        self.name = name
        self.effect_instance: Optional[EffectInstance] = None

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'MaterialBuilder':
        return cls(attributes.get('id'), attributes.get('name'))

    def build(self) -> Material:
        return Material(id=self.id, name=self.name, effect_instance=self.effect_instance)


def effect_instance_from_attributes(attributes: Attributes) -> ConstantBuilder:
    return ConstantBuilder(EffectInstance(
        url=required_uri(attributes, 'instance_effect', 'url'),
        sid=attributes.get('sid'),
        name=attributes.get('name'),
    ))


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------

class EffectBuilder(ElementBuilder):
    LISTS = {
        ParserMode.PROFILE_COMMON: 'profiles',
    }

    def __init__(self, id: Optional[str] = None, name: Optional[str] = None):
        self.id = id
        self.name = name
        self.profiles: List[CommonEffectProfile] = []

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'EffectBuilder':
        return cls(attributes.get('id'), attributes.get('name'))

    def build(self) -> Effect:
        return Effect(id=self.id, name=self.name, profiles=tuple(self.profiles))


class CommonEffectProfileBuilder(ElementBuilder):
    SLOTS = {
        ParserMode.TECHNIQUE_COMMON: 'technique',
    }
    LISTS = {
        ParserMode.NEWPARAM: 'params',
    }

    def __init__(self, id: Optional[str] = None):
        self.id = id
        self.params: List[CommonNewParam] = []
        self.technique: Optional[CommonEffectTechnique] = None

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'CommonEffectProfileBuilder':
        return cls(attributes.get('id'))

    def build(self) -> CommonEffectProfile:
        return CommonEffectProfile(id=self.id, params=tuple(self.params), technique=self.technique)


class CommonNewParamBuilder(ElementBuilder):
    SLOTS = {
        ParserMode.PARAM_SEMANTIC: 'semantic',
        ParserMode.FLOAT_PARAM: 'parameter',
        ParserMode.SAMPLER2D: 'parameter',
        ParserMode.SURFACE: 'parameter',
    }

    def __init__(self, sid: Optional[str] = None):
        self.sid = sid
        self.semantic: Optional[str] = None
        self.parameter: Optional[Param] = None

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'CommonNewParamBuilder':
        return cls(attributes.get('sid'))

    def build(self) -> CommonNewParam:
        return CommonNewParam(sid=self.sid, semantic=self.semantic, parameter=self.parameter)


class Sampler2DParamBuilder(ElementBuilder):
    SLOTS = {
        ParserMode.SAMPLER2D_SOURCE: 'source',
        ParserMode.SAMPLER2D_INSTANCE_IMAGE: 'instance_image',
        ParserMode.SAMPLER2D_WRAP_S: 'wrap_s',
        ParserMode.SAMPLER2D_WRAP_T: 'wrap_t',
        ParserMode.SAMPLER2D_MINFILTER: 'min_filter',
        ParserMode.SAMPLER2D_MAGFILTER: 'mag_filter',
        ParserMode.SAMPLER2D_MIPFILTER: 'mip_filter',
    }

    def __init__(self):
        self.source: Optional[str] = None
        self.instance_image: Optional[str] = None
        self.wrap_s: Optional[Wrap] = None
        self.wrap_t: Optional[Wrap] = None
        self.min_filter: Optional[Filter] = None
        self.mag_filter: Optional[Filter] = None
        self.mip_filter: Optional[Filter] = None

    def build(self) -> Sampler2DParam:
        return Sampler2DParam(
            source=self.source,
            instance_image=self.instance_image,
            wrap_s=self.wrap_s,
            wrap_t=self.wrap_t,
            min_filter=self.min_filter,
            mag_filter=self.mag_filter,
            mip_filter=self.mip_filter,
        )


class SurfaceParamBuilder(ElementBuilder):
    SLOTS = {
        ParserMode.SURFACE_INIT_FROM: 'init_from',
        ParserMode.SURFACE_FORMAT: 'format',
    }

    def __init__(self, type: Optional[str] = None):
        self.type = type
        self.init_from: Optional[str] = None
        self.format: Optional[str] = None

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'SurfaceParamBuilder':
        return cls(attributes.get('type'))

    def build(self) -> SurfaceParam:
        return SurfaceParam(type=self.type, init_from=self.init_from, format=self.format)


class CommonEffectTechniqueBuilder(ElementBuilder):
    SLOTS = {
        ParserMode.PHONG: 'shader',
        ParserMode.BLINN: 'shader',
        ParserMode.LAMBERT: 'shader',
        ParserMode.CONSTANT: 'shader',
    }

    def __init__(self, id: Optional[str] = None, sid: Optional[str] = None):
        self.id = id
        self.sid = sid
        self.shader: Optional[Shader] = None

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'CommonEffectTechniqueBuilder':
        return cls(attributes.get('id'), attributes.get('sid'))

    def build(self) -> CommonEffectTechnique:
        return CommonEffectTechnique(id=self.id, sid=self.sid, shader=self.shader)


class VariantBuilder(ElementBuilder):
    """
    Builds one concrete variant of a choice (shader kind, light kind,
    projection kind).

    The dispatch table picks the variant class when the element opens; child
    results are staged by field name and passed to the variant's constructor,
    so absent children keep the variant's defaults.
    """

    FIELDS: Dict[ParserMode, str] = {}

    def __init__(self, variant: Type):
        self.variant = variant
        self._accepted = set(variant.__dataclass_fields__)
        self._values: Dict[str, Any] = {}

    def attach(self, mode: ParserMode, value: Any):
        name = self.FIELDS.get(mode)
        if name is None or name not in self._accepted:
            raise IllegalStateError(f"{self.variant.__name__} has no field for {mode.name}")
        self._values[name] = value

    def build(self) -> Any:
        return self.variant(**self._values)


class ShaderBuilder(VariantBuilder):
    FIELDS = {
        ParserMode.EMISSION: 'emission',
        ParserMode.AMBIENT: 'ambient',
        ParserMode.DIFFUSE: 'diffuse',
        ParserMode.SPECULAR: 'specular',
        ParserMode.REFLECTIVE: 'reflective',
        ParserMode.TRANSPARENT: 'transparent',
        ParserMode.REFLECTIVITY: 'reflectivity',
        ParserMode.SHININESS: 'shininess',
        ParserMode.TRANSPARENCY: 'transparency',
        ParserMode.INDEX_OF_REFRACTION: 'index_of_refraction',
    }


def texture_from_attributes(attributes: Attributes) -> ConstantBuilder:
    return ConstantBuilder(ColorAttribute(
        texture=Texture(attributes.get('texture'), attributes.get('texcoord'))))


def param_ref_from_attributes(attributes: Attributes) -> ConstantBuilder:
    return ConstantBuilder(FloatAttribute(param_ref=require(attributes, 'param', 'ref')))


def instance_image_from_attributes(attributes: Attributes) -> ConstantBuilder:
    return ConstantBuilder(required_uri(attributes, 'instance_image', 'url'))


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

class GeometryBuilder(ElementBuilder):
    SLOTS = {
        ParserMode.MESH: 'geometric',
    }

    def __init__(self, id: Optional[str] = None, name: Optional[str] = None):
        self.id = id
        self.name = name
        self.geometric: Optional[Mesh] = None

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'GeometryBuilder':
        return cls(attributes.get('id'), attributes.get('name'))

    def build(self) -> Geometry:
        return Geometry(id=self.id, name=self.name, geometric=self.geometric)


class MeshBuilder(ElementBuilder):
    SLOTS = {
        ParserMode.VERTICES: 'vertices',
    }
    LISTS = {
        ParserMode.MESH_DATA_SOURCE: 'sources',
        ParserMode.TRIANGLES: 'primitives',
        ParserMode.LINES: 'primitives',
        ParserMode.POLYLIST: 'primitives',
    }

    def __init__(self):
        self.sources: List[DataFlowSource] = []
        self.vertices: Optional[Vertices] = None
        self.primitives: List[Primitive] = []

    def build(self) -> Mesh:
        return Mesh(sources=tuple(self.sources), vertices=self.vertices,
                    primitives=tuple(self.primitives))


class DataFlowSourceBuilder(ElementBuilder):
    """
    Stages a <source>.

    There is a single array slot: whichever *_array child appears becomes the
    payload, so a source never holds two arrays.
    """

    SLOTS = {
        ParserMode.FLOAT_ARRAY: 'array',
        ParserMode.NAME_ARRAY: 'array',
        ParserMode.IDREF_ARRAY: 'array',
        ParserMode.INT_ARRAY: 'array',
        ParserMode.ACCESSOR: 'accessor',
    }

    def __init__(self, id: Optional[str] = None, name: Optional[str] = None):
        self.id = id
        self.name = name
        self.array: Optional[DataArray] = None
        self.accessor: Optional[Accessor] = None

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'DataFlowSourceBuilder':
        return cls(attributes.get('id'), attributes.get('name'))

    def build(self) -> DataFlowSource:
        technique = None
        if self.accessor is not None:
            technique = CommonSourceTechnique(self.accessor)
        return DataFlowSource(id=self.id, name=self.name, array=self.array,
                              common_technique=technique)


def _check_count(element: str, count: int):
    if count < 0:
        raise MalformedValueError(f"<{element} count> must not be negative, got {count}")


class NumericArrayBuilder(ElementBuilder):
    """
    Base of the numeric *_array builders.

    Storage is preallocated from the declared count; values missing from the
    payload stay zero, surplus values are rejected.
    """

    dtype = numpy.float64
    reader_class: Type = ChunkFloatReader

    def __init__(self, element: str, count: int, id: Optional[str] = None,
                 name: Optional[str] = None):
        _check_count(element, count)
        self.element = element
        self.count = count
        self.id = id
        self.name = name
        self.values = numpy.zeros(count, dtype=self.dtype)
        self._index = 0
        self._reader = self.reader_class(self._store)

    def _store(self, value):
        if self._index >= self.count:
            raise MalformedValueError(f"<{self.element}> holds more than count={self.count} values")
        try:
            self.values[self._index] = value
        except OverflowError:
            raise MalformedValueError(f"<{self.element}> value out of range", str(value)) from None
        self._index += 1

    def add_text(self, fragment: str):
        self._reader.feed(fragment)

    def _finish(self) -> numpy.ndarray:
        self._reader.finish()
        self.values.flags.writeable = False
        return self.values


class FloatArrayBuilder(NumericArrayBuilder):

    def __init__(self, count: int, id: Optional[str] = None, name: Optional[str] = None,
                 digits: Optional[int] = None, magnitude: Optional[int] = None):
        super().__init__('float_array', count, id, name)
        self.digits = digits
        self.magnitude = magnitude

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'FloatArrayBuilder':
        return cls(
            count=required_int(attributes, 'float_array', 'count'),
            id=attributes.get('id'),
            name=attributes.get('name'),
            digits=optional_int(attributes, 'float_array', 'digits'),
            magnitude=optional_int(attributes, 'float_array', 'magnitude'),
        )

    def build(self) -> FloatArray:
        return FloatArray(count=self.count, values=self._finish(), id=self.id, name=self.name,
                          digits=self.digits, magnitude=self.magnitude)


class IntArrayBuilder(NumericArrayBuilder):
    dtype = numpy.int64
    reader_class = ChunkIntReader

    def __init__(self, count: int, id: Optional[str] = None, name: Optional[str] = None):
        super().__init__('int_array', count, id, name)

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'IntArrayBuilder':
        return cls(required_int(attributes, 'int_array', 'count'),
                   attributes.get('id'), attributes.get('name'))

    def build(self) -> IntArray:
        return IntArray(count=self.count, values=self._finish(), id=self.id, name=self.name)


class NameArrayBuilder(ElementBuilder):
    """Builds Name_array and IDREF_array payloads"""

    def __init__(self, element: str, count: int, id: Optional[str] = None,
                 name: Optional[str] = None, array_class: Type[NameArray] = NameArray):
        _check_count(element, count)
        self.element = element
        self.count = count
        self.id = id
        self.name = name
        self.array_class = array_class
        self.values: List[Optional[str]] = [None] * count
        self._index = 0
        self._reader = ChunkStringReader(self._store)

    @classmethod
    def from_attributes(cls, element: str, attributes: Attributes,
                        array_class: Type[NameArray] = NameArray) -> 'NameArrayBuilder':
        return cls(element, required_int(attributes, element, 'count'),
                   attributes.get('id'), attributes.get('name'), array_class)

    def _store(self, value: str):
        if self._index >= self.count:
            raise MalformedValueError(f"<{self.element}> holds more than count={self.count} values")
        self.values[self._index] = value
        self._index += 1

    def add_text(self, fragment: str):
        self._reader.feed(fragment)

    def build(self) -> NameArray:
        self._reader.finish()
        return self.array_class(count=self.count, values=tuple(self.values),
                                id=self.id, name=self.name)


class AccessorBuilder(ElementBuilder):
    LISTS = {
        ParserMode.ACCESSOR_PARAM: 'params',
    }

    def __init__(self, source: str, count: int, offset: int = 0, stride: int = 1):
        if count < 0:
            raise MalformedValueError(f"<accessor count> must not be negative, got {count}")
        if offset < 0:
            raise MalformedValueError(f"<accessor offset> must not be negative, got {offset}")
        if stride < 1:
            raise MalformedValueError(f"<accessor stride> must be at least 1, got {stride}")
        self.source = source
        self.count = count
        self.offset = offset
        self.stride = stride
        self.params: List[DataFlowParam] = []

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'AccessorBuilder':
        return cls(
            source=required_uri(attributes, 'accessor', 'source'),
            count=required_int(attributes, 'accessor', 'count'),
            offset=optional_int(attributes, 'accessor', 'offset', 0),
            stride=optional_int(attributes, 'accessor', 'stride', 1),
        )

    def build(self) -> Accessor:
        return Accessor(source=self.source, count=self.count, offset=self.offset,
                        stride=self.stride, params=tuple(self.params))


def accessor_param_from_attributes(attributes: Attributes) -> ConstantBuilder:
    type_name = require(attributes, 'param', 'type')
    return ConstantBuilder(DataFlowParam(
        type=parse_enum(DataType, type_name.lower(), "<param type>"),
        name=attributes.get('name'),
        semantic=attributes.get('semantic'),
        sid=attributes.get('sid'),
    ))


class VerticesBuilder(ElementBuilder):
    LISTS = {
        ParserMode.VERTICES_INPUT: 'inputs',
    }

    def __init__(self, id: Optional[str] = None, name: Optional[str] = None):
        self.id = id
        self.name = name
        self.inputs: List[UnsharedInput] = []

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'VerticesBuilder':
        return cls(attributes.get('id'), attributes.get('name'))

    def build(self) -> Vertices:
        return Vertices(id=self.id, name=self.name, inputs=tuple(self.inputs))


def unshared_input_from_attributes(attributes: Attributes) -> ConstantBuilder:
    return ConstantBuilder(UnsharedInput(
        semantic=require(attributes, 'input', 'semantic'),
        source=required_uri(attributes, 'input', 'source'),
    ))


def shared_input_from_attributes(attributes: Attributes) -> ConstantBuilder:
    return ConstantBuilder(SharedInput(
        semantic=require(attributes, 'input', 'semantic'),
        source=required_uri(attributes, 'input', 'source'),
        offset=required_int(attributes, 'input', 'offset'),
        set=optional_int(attributes, 'input', 'set'),
    ))


class PrimitiveDataBuilder(ElementBuilder):
    """Collects the integers of a <p> or <vcount> element"""

    def __init__(self):
        self.values: List[int] = []
        self._reader = ChunkIntReader(self.values.append)

    def add_text(self, fragment: str):
        self._reader.feed(fragment)

    def build(self) -> PrimitiveData:
        self._reader.finish()
        try:
            values = numpy.array(self.values, dtype=numpy.int64)
        except OverflowError:
            raise MalformedValueError("Index out of range", str(max(self.values, key=abs))) from None
        values.flags.writeable = False
        return PrimitiveData(values)


class PrimitiveBuilder(ElementBuilder):
    """
    Stages a <triangles>, <lines> or <polylist>.

    The declared count is kept as authored; it is never reconciled with the
    length of the index data.
    """

    SLOTS = {
        ParserMode.POLYLIST_VCOUNT: 'vcount',
    }
    LISTS = {
        ParserMode.PRIMITIVE_INPUT: 'inputs',
    }

    def __init__(self, primitive_class: Type[Primitive], count: int,
                 name: Optional[str] = None, material: Optional[str] = None):
        self.primitive_class = primitive_class
        self.count = count
        self.name = name
        self.material = material
        self.inputs: List[SharedInput] = []
        self.data: Optional[PrimitiveData] = None
        self.vcount: Optional[PrimitiveData] = None

    @classmethod
    def from_attributes(cls, element: str, primitive_class: Type[Primitive],
                        attributes: Attributes) -> 'PrimitiveBuilder':
        return cls(primitive_class, required_int(attributes, element, 'count'),
                   attributes.get('name'), attributes.get('material'))

    def attach(self, mode: ParserMode, value: Any):
        if mode is ParserMode.PRIMITIVE_P:
            # Consecutive <p> elements continue the same index buffer
            if self.data is not None:
                merged = numpy.concatenate((self.data.values, value.values))
                merged.flags.writeable = False
                value = PrimitiveData(merged)
            self.data = value
        else:
            super().attach(mode, value)

    def build(self) -> Primitive:
        values = dict(count=self.count, name=self.name, material=self.material,
                      inputs=tuple(self.inputs))
        if self.data is not None:
            values['data'] = self.data
        if self.primitive_class is Polylist and self.vcount is not None:
            values['vcount'] = self.vcount
        return self.primitive_class(**values)


# ---------------------------------------------------------------------------
# Lights
# ---------------------------------------------------------------------------

class LightBuilder(ElementBuilder):
    SLOTS = {
        ParserMode.LIGHT_AMBIENT: 'source',
        ParserMode.LIGHT_DIRECTIONAL: 'source',
        ParserMode.LIGHT_POINT: 'source',
        ParserMode.LIGHT_SPOT: 'source',
    }

    def __init__(self, id: Optional[str] = None, name: Optional[str] = None):
        self.id = id
        self.name = name
        self.source: Optional[LightSource] = None

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'LightBuilder':
        return cls(attributes.get('id'), attributes.get('name'))

    def build(self) -> Light:
        return Light(id=self.id, name=self.name, source=self.source)


class LightSourceBuilder(VariantBuilder):
    FIELDS = {
        ParserMode.LIGHT_COLOR: 'color',
        ParserMode.CONSTANT_ATTENUATION: 'constant_attenuation',
        ParserMode.LINEAR_ATTENUATION: 'linear_attenuation',
        ParserMode.QUADRATIC_ATTENUATION: 'quadratic_attenuation',
        ParserMode.FALLOFF_ANGLE: 'falloff_angle',
        ParserMode.FALLOFF_EXPONENT: 'falloff_exponent',
    }


def light_color_from_attributes(attributes: Attributes) -> ColorBuilder:
    return ColorBuilder(3, attributes.get('sid'))


# ---------------------------------------------------------------------------
# Cameras
# ---------------------------------------------------------------------------

class CameraBuilder(ElementBuilder):
    SLOTS = {
        ParserMode.PERSPECTIVE: 'projection',
        ParserMode.ORTHOGRAPHIC: 'projection',
    }

    def __init__(self, id: Optional[str] = None, name: Optional[str] = None):
        self.id = id
        self.name = name
        self.projection: Optional[Projection] = None

    @classmethod
    def from_attributes(cls, attributes: Attributes) -> 'CameraBuilder':
        return cls(attributes.get('id'), attributes.get('name'))

    def build(self) -> Camera:
        return Camera(id=self.id, name=self.name, projection=self.projection)


class ProjectionBuilder(VariantBuilder):
    FIELDS = {
        ParserMode.XFOV: 'xfov',
        ParserMode.YFOV: 'yfov',
        ParserMode.XMAG: 'xmag',
        ParserMode.YMAG: 'ymag',
        ParserMode.ASPECT_RATIO: 'aspect_ratio',
        ParserMode.ZNEAR: 'znear',
        ParserMode.ZFAR: 'zfar',
    }
