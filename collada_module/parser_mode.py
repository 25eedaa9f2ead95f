"""
Parser Modes

Every grammar position the engine distinguishes is a ParserMode member. Modes
that correspond to a real element carry the local name of that element, which
is the closing tag that leaves the mode again.
"""

from typing import List, Optional

from enum import Enum

from .errors import IllegalStateError


class ParserMode(Enum):
    """Named grammar positions; value is (key, expected closing tag name)"""

    ROOT = ('root', None)
    COLLADA = ('collada', 'COLLADA')
    EXTRA = ('extra', 'extra')

    # asset
    ASSET = ('asset', 'asset')
    ASSET_CREATED = ('asset_created', 'created')
    ASSET_MODIFIED = ('asset_modified', 'modified')
    ASSET_TITLE = ('asset_title', 'title')
    ASSET_UNIT = ('asset_unit', 'unit')
    ASSET_UP_AXIS = ('asset_up_axis', 'up_axis')

    # images
    LIBRARY_IMAGES = ('library_images', 'library_images')
    IMAGE = ('image', 'image')
    IMAGE_INIT_FROM = ('image_init_from', 'init_from')
    IMAGE_INIT_FROM_REF = ('image_init_from_ref', 'ref')

    # materials
    LIBRARY_MATERIALS = ('library_materials', 'library_materials')
    MATERIAL = ('material', 'material')
    INSTANCE_EFFECT = ('instance_effect', 'instance_effect')

    # effects
    LIBRARY_EFFECTS = ('library_effects', 'library_effects')
    EFFECT = ('effect', 'effect')
    PROFILE_COMMON = ('profile_common', 'profile_COMMON')
    NEWPARAM = ('newparam', 'newparam')
    PARAM_SEMANTIC = ('param_semantic', 'semantic')
    FLOAT_PARAM = ('float_param', 'float')
    SAMPLER2D = ('sampler2d', 'sampler2D')
    SAMPLER2D_SOURCE = ('sampler2d_source', 'source')
    SAMPLER2D_INSTANCE_IMAGE = ('sampler2d_instance_image', 'instance_image')
    SAMPLER2D_MINFILTER = ('sampler2d_minfilter', 'minfilter')
    SAMPLER2D_MAGFILTER = ('sampler2d_magfilter', 'magfilter')
    SAMPLER2D_MIPFILTER = ('sampler2d_mipfilter', 'mipfilter')
    SAMPLER2D_WRAP_S = ('sampler2d_wrap_s', 'wrap_s')
    SAMPLER2D_WRAP_T = ('sampler2d_wrap_t', 'wrap_t')
    SURFACE = ('surface', 'surface')
    SURFACE_INIT_FROM = ('surface_init_from', 'init_from')
    SURFACE_FORMAT = ('surface_format', 'format')
    TECHNIQUE_COMMON = ('technique_common', 'technique')
    PHONG = ('phong', 'phong')
    BLINN = ('blinn', 'blinn')
    LAMBERT = ('lambert', 'lambert')
    CONSTANT = ('constant', 'constant')
    EMISSION = ('emission', 'emission')
    AMBIENT = ('ambient', 'ambient')
    DIFFUSE = ('diffuse', 'diffuse')
    SPECULAR = ('specular', 'specular')
    REFLECTIVE = ('reflective', 'reflective')
    TRANSPARENT = ('transparent', 'transparent')
    REFLECTIVITY = ('reflectivity', 'reflectivity')
    SHININESS = ('shininess', 'shininess')
    TRANSPARENCY = ('transparency', 'transparency')
    INDEX_OF_REFRACTION = ('index_of_refraction', 'index_of_refraction')
    SHADING_COLOR = ('shading_color', 'color')
    TEXTURE = ('texture', 'texture')
    FLOAT = ('float', 'float')
    PARAM_REF = ('param_ref', 'param')

    # geometries
    LIBRARY_GEOMETRIES = ('library_geometries', 'library_geometries')
    GEOMETRY = ('geometry', 'geometry')
    MESH = ('mesh', 'mesh')
    MESH_DATA_SOURCE = ('mesh_data_source', 'source')
    FLOAT_ARRAY = ('float_array', 'float_array')
    NAME_ARRAY = ('name_array', 'Name_array')
    IDREF_ARRAY = ('idref_array', 'IDREF_array')
    INT_ARRAY = ('int_array', 'int_array')
    SOURCE_TECHNIQUE_COMMON = ('source_technique_common', 'technique_common')
    ACCESSOR = ('accessor', 'accessor')
    ACCESSOR_PARAM = ('accessor_param', 'param')
    VERTICES = ('vertices', 'vertices')
    VERTICES_INPUT = ('vertices_input', 'input')
    TRIANGLES = ('triangles', 'triangles')
    LINES = ('lines', 'lines')
    POLYLIST = ('polylist', 'polylist')
    PRIMITIVE_INPUT = ('primitive_input', 'input')
    PRIMITIVE_P = ('primitive_p', 'p')
    POLYLIST_VCOUNT = ('polylist_vcount', 'vcount')

    # lights
    LIBRARY_LIGHTS = ('library_lights', 'library_lights')
    LIGHT = ('light', 'light')
    LIGHT_TECHNIQUE_COMMON = ('light_technique_common', 'technique_common')
    LIGHT_AMBIENT = ('light_ambient', 'ambient')
    LIGHT_DIRECTIONAL = ('light_directional', 'directional')
    LIGHT_POINT = ('light_point', 'point')
    LIGHT_SPOT = ('light_spot', 'spot')
    LIGHT_COLOR = ('light_color', 'color')
    CONSTANT_ATTENUATION = ('constant_attenuation', 'constant_attenuation')
    LINEAR_ATTENUATION = ('linear_attenuation', 'linear_attenuation')
    QUADRATIC_ATTENUATION = ('quadratic_attenuation', 'quadratic_attenuation')
    FALLOFF_ANGLE = ('falloff_angle', 'falloff_angle')
    FALLOFF_EXPONENT = ('falloff_exponent', 'falloff_exponent')

    # cameras
    LIBRARY_CAMERAS = ('library_cameras', 'library_cameras')
    CAMERA = ('camera', 'camera')
    OPTICS = ('optics', 'optics')
    OPTICS_TECHNIQUE_COMMON = ('optics_technique_common', 'technique_common')
    PERSPECTIVE = ('perspective', 'perspective')
    ORTHOGRAPHIC = ('orthographic', 'orthographic')
    XFOV = ('xfov', 'xfov')
    YFOV = ('yfov', 'yfov')
    XMAG = ('xmag', 'xmag')
    YMAG = ('ymag', 'ymag')
    ASPECT_RATIO = ('aspect_ratio', 'aspect_ratio')
    ZNEAR = ('znear', 'znear')
    ZFAR = ('zfar', 'zfar')

    # recognized but never populated
    LIBRARY_ANIMATIONS = ('library_animations', 'library_animations')
    LIBRARY_VISUAL_SCENES = ('library_visual_scenes', 'library_visual_scenes')

    def __init__(self, key: str, tag_name: Optional[str]):
        self.key = key
        self.tag_name = tag_name

    def __repr__(self) -> str:
        return f"<ParserMode.{self.name}>"


class ModeStack:
    """
    Explicit stack of grammar positions.

    `enter` pushes the current mode and switches to the new one, `leave`
    pops back. The stack is empty exactly when the current mode is the one
    the stack started in.
    """

    def __init__(self, initial: ParserMode = ParserMode.ROOT):
        self._current = initial
        self._stack: List[ParserMode] = []

    @property
    def current(self) -> ParserMode:
        return self._current

    @property
    def depth(self) -> int:
        return len(self._stack)

    def is_empty(self) -> bool:
        return not self._stack

    def enter(self, mode: ParserMode):
        """Push the current mode and switch to `mode`"""
        self._stack.append(self._current)
        self._current = mode

    def leave(self) -> ParserMode:
        """Pop back to the enclosing mode and return the mode that was left"""
        if not self._stack:
            raise IllegalStateError(f"Cannot leave {self._current.name}: mode stack is empty")
        left = self._current
        self._current = self._stack.pop()
        return left

    def __len__(self) -> int:
        return len(self._stack)

    def __str__(self) -> str:
        path = [mode.name for mode in self._stack] + [self._current.name]
        return " > ".join(path)
