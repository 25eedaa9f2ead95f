"""
COLLADA Data Structures

This module contains the immutable value types produced by the assembly
engine. They are pure value holders: every instance is created once by a
builder when its element closes and never changes afterwards.
"""

from typing import Generic, Iterator, Optional, Tuple, TypeVar, Union
from dataclasses import dataclass, field
from enum import Enum

import numpy


T = TypeVar('T')

# URIs are stored verbatim (absolute or fragment form) and never dereferenced
URI = str


class UpAxis(Enum):
    """Asset up axis"""
    X_UP = "X_UP"
    Y_UP = "Y_UP"
    Z_UP = "Z_UP"


class Filter(Enum):
    """Texture sampler filter"""
    NONE = "NONE"
    NEAREST = "NEAREST"
    LINEAR = "LINEAR"
    NEAREST_MIPMAP_NEAREST = "NEAREST_MIPMAP_NEAREST"
    LINEAR_MIPMAP_NEAREST = "LINEAR_MIPMAP_NEAREST"
    NEAREST_MIPMAP_LINEAR = "NEAREST_MIPMAP_LINEAR"
    LINEAR_MIPMAP_LINEAR = "LINEAR_MIPMAP_LINEAR"
    ANISOTROPIC = "ANISOTROPIC"


class Wrap(Enum):
    """Texture sampler wrap mode"""
    NONE = "NONE"
    WRAP = "WRAP"
    MIRROR = "MIRROR"
    CLAMP = "CLAMP"
    BORDER = "BORDER"
    MIRROR_ONCE = "MIRROR_ONCE"


class DataType(Enum):
    """Type of an accessor param"""
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    DOUBLE = "double"
    NAME = "name"
    IDREF = "idref"
    SIDREF = "sidref"
    TOKEN = "token"
    FLOAT2X2 = "float2x2"
    FLOAT3X3 = "float3x3"
    FLOAT4X4 = "float4x4"


# ---------------------------------------------------------------------------
# Shared values
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FloatValue:
    """A float with an optional scoped id"""
    value: float = 0.0
    sid: Optional[str] = None


@dataclass(frozen=True)
class RGBColor:
    """An RGB color as used by light sources"""
    red: float = 0.0
    green: float = 0.0
    blue: float = 0.0
    sid: Optional[str] = None


@dataclass(frozen=True)
class RGBAColor:
    """An RGBA color as used by shaders"""
    red: float = 0.0
    green: float = 0.0
    blue: float = 0.0
    alpha: float = 1.0
    sid: Optional[str] = None


@dataclass(frozen=True)
class Asset:
    """Document-level asset information"""
    created: Optional[str] = None
    modified: Optional[str] = None
    title: Optional[str] = None
    unit_name: str = "meter"
    unit_meter: float = 1.0
    up_axis: UpAxis = UpAxis.Y_UP


@dataclass(frozen=True)
class Unit:
    """Distance unit of an asset"""
    name: str = "meter"
    meter: float = 1.0


# ---------------------------------------------------------------------------
# Images and materials
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ImageSource:
    """Where an image is initialized from"""
    ref: Optional[URI] = None
    generate_mips: bool = False


@dataclass(frozen=True)
class Image:
    """Represents a COLLADA image"""
    id: Optional[str] = None
    name: Optional[str] = None
    sid: Optional[str] = None
    source: Optional[ImageSource] = None


@dataclass(frozen=True)
class EffectInstance:
    """Instantiation of an effect by a material"""
    url: URI
    sid: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class Material:
    """Represents a COLLADA material"""
    id: Optional[str] = None
    name: Optional[str] = None
    effect_instance: Optional[EffectInstance] = None


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Texture:
    """Reference to a sampler plus the texture coordinate set to use"""
    texture: Optional[str] = None
    texcoord: Optional[str] = None


@dataclass(frozen=True)
class ColorAttribute:
    """A shader attribute holding either a color or a texture"""
    color: Optional[RGBAColor] = None
    texture: Optional[Texture] = None

    def is_texture(self) -> bool:
        return self.texture is not None


@dataclass(frozen=True)
class FloatAttribute:
    """A shader attribute holding either a float or a reference to a param"""
    value: Optional[FloatValue] = None
    param_ref: Optional[str] = None

    def is_param(self) -> bool:
        return self.param_ref is not None


@dataclass(frozen=True)
class Shader:
    """Attributes shared by every common-profile shader"""
    emission: Optional[ColorAttribute] = None
    reflective: Optional[ColorAttribute] = None
    reflectivity: Optional[FloatAttribute] = None
    transparent: Optional[ColorAttribute] = None
    transparency: Optional[FloatAttribute] = None
    index_of_refraction: Optional[FloatAttribute] = None


@dataclass(frozen=True)
class ConstantShader(Shader):
    """Constant (unlit) shader"""
    pass


@dataclass(frozen=True)
class LambertShader(Shader):
    """Lambert (diffuse only) shader"""
    ambient: Optional[ColorAttribute] = None
    diffuse: Optional[ColorAttribute] = None


@dataclass(frozen=True)
class PhongShader(Shader):
    """Phong shader"""
    ambient: Optional[ColorAttribute] = None
    diffuse: Optional[ColorAttribute] = None
    specular: Optional[ColorAttribute] = None
    shininess: Optional[FloatAttribute] = None


@dataclass(frozen=True)
class BlinnShader(PhongShader):
    """Blinn shader; same attributes as Phong with a different specular model"""
    pass


@dataclass(frozen=True)
class FloatParam:
    """A float effect parameter"""
    value: float = 0.0


@dataclass(frozen=True)
class Sampler2DParam:
    """A 2D texture sampler effect parameter"""
    source: Optional[str] = None
    instance_image: Optional[URI] = None
    wrap_s: Optional[Wrap] = None
    wrap_t: Optional[Wrap] = None
    min_filter: Optional[Filter] = None
    mag_filter: Optional[Filter] = None
    mip_filter: Optional[Filter] = None


@dataclass(frozen=True)
class SurfaceParam:
    """A surface effect parameter (COLLADA 1.4)"""
    type: Optional[str] = None
    init_from: Optional[str] = None
    format: Optional[str] = None


Param = Union[FloatParam, Sampler2DParam, SurfaceParam]


@dataclass(frozen=True)
class CommonNewParam:
    """A parameter declared by a common effect profile"""
    sid: Optional[str] = None
    semantic: Optional[str] = None
    parameter: Optional[Param] = None


@dataclass(frozen=True)
class CommonEffectTechnique:
    """Technique of a common effect profile"""
    id: Optional[str] = None
    sid: Optional[str] = None
    shader: Optional[Shader] = None


@dataclass(frozen=True)
class CommonEffectProfile:
    """The profile_COMMON of an effect"""
    id: Optional[str] = None
    params: Tuple[CommonNewParam, ...] = ()
    technique: Optional[CommonEffectTechnique] = None


@dataclass(frozen=True)
class Effect:
    """Represents a COLLADA effect"""
    id: Optional[str] = None
    name: Optional[str] = None
    profiles: Tuple[CommonEffectProfile, ...] = ()


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class FloatArray:
    """A float_array payload; values are a read-only float64 numpy array"""
    count: int
    values: numpy.ndarray
    id: Optional[str] = None
    name: Optional[str] = None
    digits: Optional[int] = None
    magnitude: Optional[int] = None

    def __len__(self) -> int:
        return self.count


@dataclass(frozen=True, eq=False)
class IntArray:
    """An int_array payload; values are a read-only int64 numpy array"""
    count: int
    values: numpy.ndarray
    id: Optional[str] = None
    name: Optional[str] = None

    def __len__(self) -> int:
        return self.count


@dataclass(frozen=True)
class NameArray:
    """A Name_array payload"""
    count: int
    values: Tuple[Optional[str], ...]
    id: Optional[str] = None
    name: Optional[str] = None

    def __len__(self) -> int:
        return self.count


@dataclass(frozen=True)
class IDREFArray(NameArray):
    """An IDREF_array payload"""
    pass


DataArray = Union[FloatArray, IntArray, NameArray]


@dataclass(frozen=True)
class DataFlowParam:
    """A typed slot of an accessor tuple"""
    type: DataType
    name: Optional[str] = None
    semantic: Optional[str] = None
    sid: Optional[str] = None


@dataclass(frozen=True)
class Accessor:
    """Describes how to read a flat array as a sequence of tuples"""
    source: URI
    count: int
    offset: int = 0
    stride: int = 1
    params: Tuple[DataFlowParam, ...] = ()

    def required_length(self) -> int:
        """Minimum number of array elements needed to read every tuple"""
        if self.count == 0:
            return 0
        return self.offset + self.stride * (self.count - 1) + len(self.params)


@dataclass(frozen=True)
class CommonSourceTechnique:
    """The technique_common of a data source"""
    accessor: Accessor


@dataclass(frozen=True)
class DataFlowSource:
    """A named array with an optional accessor describing its layout"""
    id: Optional[str] = None
    name: Optional[str] = None
    array: Optional[DataArray] = None
    common_technique: Optional[CommonSourceTechnique] = None

    @property
    def accessor(self) -> Optional[Accessor]:
        if self.common_technique is None:
            return None
        return self.common_technique.accessor


@dataclass(frozen=True)
class UnsharedInput:
    """Input without an index offset (used by vertices)"""
    semantic: str
    source: URI


@dataclass(frozen=True)
class SharedInput:
    """Input with an index offset into the primitive data (used by primitives)"""
    semantic: str
    source: URI
    offset: int
    set: Optional[int] = None


@dataclass(frozen=True, eq=False)
class PrimitiveData:
    """Flat index buffer of a primitive; values are a read-only int64 numpy array"""
    values: numpy.ndarray = field(default_factory=lambda: numpy.zeros(0, dtype=numpy.int64))

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class Vertices:
    """Mesh vertex attribute bindings"""
    id: Optional[str] = None
    name: Optional[str] = None
    inputs: Tuple[UnsharedInput, ...] = ()


@dataclass(frozen=True)
class Primitive:
    """Attributes shared by every primitive kind"""
    count: int
    name: Optional[str] = None
    material: Optional[str] = None
    inputs: Tuple[SharedInput, ...] = ()
    data: PrimitiveData = field(default_factory=PrimitiveData)


@dataclass(frozen=True)
class Triangles(Primitive):
    """Triangle list primitive"""
    pass


@dataclass(frozen=True)
class Lines(Primitive):
    """Line list primitive"""
    pass


@dataclass(frozen=True)
class Polylist(Primitive):
    """Polygon list primitive with per-polygon vertex counts"""
    vcount: PrimitiveData = field(default_factory=PrimitiveData)


@dataclass(frozen=True)
class Mesh:
    """Represents a COLLADA mesh"""
    sources: Tuple[DataFlowSource, ...] = ()
    vertices: Optional[Vertices] = None
    primitives: Tuple[Primitive, ...] = ()


@dataclass(frozen=True)
class Geometry:
    """Represents a COLLADA geometry"""
    id: Optional[str] = None
    name: Optional[str] = None
    geometric: Optional[Mesh] = None


# ---------------------------------------------------------------------------
# Cameras
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Projection:
    """Attributes shared by both projection kinds"""
    aspect_ratio: Optional[FloatValue] = None
    znear: Optional[FloatValue] = None
    zfar: Optional[FloatValue] = None


@dataclass(frozen=True)
class Perspective(Projection):
    """Perspective projection"""
    xfov: Optional[FloatValue] = None
    yfov: Optional[FloatValue] = None


@dataclass(frozen=True)
class Orthographic(Projection):
    """Orthographic projection"""
    xmag: Optional[FloatValue] = None
    ymag: Optional[FloatValue] = None


@dataclass(frozen=True)
class Camera:
    """Represents a COLLADA camera"""
    id: Optional[str] = None
    name: Optional[str] = None
    projection: Optional[Projection] = None


# ---------------------------------------------------------------------------
# Lights
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LightSource:
    """Attributes shared by every light source kind"""
    color: RGBColor = field(default_factory=RGBColor)


@dataclass(frozen=True)
class AmbientLightSource(LightSource):
    """Ambient light"""
    pass


@dataclass(frozen=True)
class DirectionalLightSource(LightSource):
    """Directional light"""
    pass


@dataclass(frozen=True)
class PointLightSource(LightSource):
    """Point light"""
    constant_attenuation: FloatValue = field(default_factory=lambda: FloatValue(1.0))
    linear_attenuation: FloatValue = field(default_factory=lambda: FloatValue(0.0))
    quadratic_attenuation: FloatValue = field(default_factory=lambda: FloatValue(0.0))


@dataclass(frozen=True)
class SpotLightSource(PointLightSource):
    """Spot light"""
    falloff_angle: FloatValue = field(default_factory=lambda: FloatValue(180.0))
    falloff_exponent: FloatValue = field(default_factory=lambda: FloatValue(0.0))


@dataclass(frozen=True)
class Light:
    """Represents a COLLADA light"""
    id: Optional[str] = None
    name: Optional[str] = None
    source: Optional[LightSource] = None


# ---------------------------------------------------------------------------
# Libraries and document
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Library(Generic[T]):
    """An ordered library of one kind of element"""
    name: Optional[str] = None
    id: Optional[str] = None
    items: Tuple[T, ...] = ()

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class Document:
    """
    Root of an assembled COLLADA document.

    Holds the libraries of each kind in document order. Created by the
    document builder once the COLLADA element closes.
    """
    version: Optional[str] = None
    asset: Optional[Asset] = None
    image_libraries: Tuple[Library[Image], ...] = ()
    material_libraries: Tuple[Library[Material], ...] = ()
    effect_libraries: Tuple[Library[Effect], ...] = ()
    geometry_libraries: Tuple[Library[Geometry], ...] = ()
    camera_libraries: Tuple[Library[Camera], ...] = ()
    light_libraries: Tuple[Library[Light], ...] = ()

    def iter_images(self) -> Iterator[Image]:
        for library in self.image_libraries:
            yield from library

    def iter_materials(self) -> Iterator[Material]:
        for library in self.material_libraries:
            yield from library

    def iter_effects(self) -> Iterator[Effect]:
        for library in self.effect_libraries:
            yield from library

    def iter_geometries(self) -> Iterator[Geometry]:
        for library in self.geometry_libraries:
            yield from library

    def iter_cameras(self) -> Iterator[Camera]:
        for library in self.camera_libraries:
            yield from library

    def iter_lights(self) -> Iterator[Light]:
        for library in self.light_libraries:
            yield from library

    def get_image_count(self) -> int:
        """Get the number of images across all image libraries"""
        return sum(len(library) for library in self.image_libraries)

    def get_material_count(self) -> int:
        """Get the number of materials across all material libraries"""
        return sum(len(library) for library in self.material_libraries)

    def get_effect_count(self) -> int:
        """Get the number of effects across all effect libraries"""
        return sum(len(library) for library in self.effect_libraries)

    def get_geometry_count(self) -> int:
        """Get the number of geometries across all geometry libraries"""
        return sum(len(library) for library in self.geometry_libraries)

    def get_camera_count(self) -> int:
        """Get the number of cameras across all camera libraries"""
        return sum(len(library) for library in self.camera_libraries)

    def get_light_count(self) -> int:
        """Get the number of lights across all light libraries"""
        return sum(len(library) for library in self.light_libraries)

    def is_empty(self) -> bool:
        """Check if the document holds no libraries at all"""
        return not (self.image_libraries or self.material_libraries or
                    self.effect_libraries or self.geometry_libraries or
                    self.camera_libraries or self.light_libraries)

    def __str__(self) -> str:
        return (f"Document(version={self.version}, images={self.get_image_count()}, "
                f"materials={self.get_material_count()}, effects={self.get_effect_count()}, "
                f"geometries={self.get_geometry_count()}, cameras={self.get_camera_count()}, "
                f"lights={self.get_light_count()})")
