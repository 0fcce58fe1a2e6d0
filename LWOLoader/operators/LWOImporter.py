import bpy
from bpy_extras.io_utils import ImportHelper
from bpy.props import (
        BoolProperty,
        StringProperty,
        )

class LWOLOADER_PT_import_settings(bpy.types.Panel):
    bl_space_type = "FILE_BROWSER"
    bl_region_type = "TOOL_PROPS"
    bl_label = "Settings"
    bl_parent_id = "FILE_PT_operator"

    @classmethod
    def poll(cls, context):
        sfile = context.space_data
        operator = sfile.active_operator

        return operator.bl_idname == "IMPORT_MESH_OT_lwoloader"

    def draw(self, context):
        layout = self.layout
        layout.use_property_split = True
        layout.use_property_decorate = False

        sfile = context.space_data
        operator = sfile.active_operator

        layout.prop(operator, "shared_path")
        layout.prop(operator, "reuse_assets")
        layout.prop(operator, "pad_odd_chunks")
        layout.prop(operator, "verbose")

import logging
from contextlib import ExitStack
from .. import LwoLoad
from ..LwoErrors import LwoError
from ..LwoSurface import planar_project
from pathlib import Path
class LWOImporter(bpy.types.Operator, ImportHelper):
    """LightWave Object Importer"""
    bl_idname = "import_mesh.lwoloader"
    bl_label = "Import LWO"
    filename_ext = ".lwo"
    filter_glob: StringProperty(default="*.lwo", options={'HIDDEN'})

    shared_path: StringProperty(
        name = "Shared asset folder",
        description = "Path to the folder with textures shared between multiple models",
        default = "",
        subtype = "DIR_PATH"
        )

    reuse_assets: BoolProperty(
        name = "Reuse materials and textures",
        description = "Reuse materials and texture if they already have been loaded into blender",
        default = True
        )

    pad_odd_chunks: BoolProperty(
        name = "Pad odd chunks",
        description = "Expect a pad byte after chunks with an odd length",
        default = False
        )

    verbose: BoolProperty(
        name = "Verbose log",
        description = "Log every chunk while loading",
        default = False
        )

    def execute(self, context):
        keywords = self.as_keywords(ignore=("axis_forward",
                                            "axis_up",
                                            "filter_glob",
                                            ))

        path = Path(keywords["filepath"])
        dir = path.parent

        with ExitStack() as stack:
            if keywords["verbose"]:
                stack.enter_context(LwoLoad.verbose_logging())
            try:
                lwo_data = LwoLoad.load_lwo(keywords["filepath"], pad_odd_chunks = keywords["pad_odd_chunks"])
            except (LwoError, OSError) as e:
                self.report({"ERROR"}, f"Failed to load {path.name}: {e}")
                return {"CANCELLED"}

        # Points are dropped, lines become loose edges
        faces = []
        faceSurfs = []
        edges = []
        surfNames = []
        for facet, surfName in lwo_data.iter_faces():
            if len(facet) >= 3:
                faces.append(facet)
                faceSurfs.append(surfName)
                if surfName not in surfNames:
                    surfNames.append(surfName)
            elif len(facet) == 2:
                edges.append(facet)

        mesh = bpy.data.meshes.new(f"{path.stem} mesh")
        mesh.from_pydata(lwo_data.verts, edges, faces)

        """ Create new uv layer """
        uvd = mesh.uv_layers.new().data

        """ Generate materials """
        for surfName in surfNames:
            surf = lwo_data.surfs.get(surfName)
            mat = get_material(path, surfName, surf, dir, keywords)
            mesh.materials.append(mat)

        # Set materials and planar uvs for polygons
        for i, polygon in enumerate(mesh.polygons):
            surfName = faceSurfs[i]
            polygon.material_index = surfNames.index(surfName)

            surf = lwo_data.surfs.get(surfName)
            if surf and surf.ctex and surf.ctex.planar:
                for j in range(len(polygon.vertices)):
                    vertex = mesh.vertices[polygon.vertices[j]].co
                    uvd[polygon.loop_start + j].uv = planar_project(surf.ctex, vertex)

        mesh.validate()
        mesh.update()
        # Create object
        obj = bpy.data.objects.new(path.stem, mesh)

        collection = bpy.context.collection
        if not collection:
            collection = bpy.data.collections.new(path.name)
            bpy.context.scene.collection.children.link(collection)
        collection.objects.link(obj)

        obj.select_set(True)
        bpy.context.view_layer.objects.active = obj

        return {"FINISHED"}

    def draw(self, context):
        pass


def get_material(path, surfName, surf, dir, keywords):
    matname = f"{path.stem}_{surfName or 'Default'}"

    # Check if we should reuse assets
    if keywords["reuse_assets"] and matname in bpy.data.materials:
        return bpy.data.materials[matname]

    mat = bpy.data.materials.new(name = matname)
    mat.use_nodes = True
    tree = mat.node_tree
    bsdf = tree.nodes["Principled BSDF"]

    if not surf:
        return mat

    mat.use_backface_culling = not surf.doubleSided
    bsdf.inputs["Base Color"].default_value = (*surf.color, 1)

    if surf.transparency > 0:
        mat.blend_method = "BLEND"
        bsdf.inputs["Alpha"].default_value = 1.0 - surf.transparency

    """ Add texture if present """
    ctex = surf.ctex
    if ctex and ctex.filepath:
        tex = tree.nodes.new("ShaderNodeTexImage")
        tex.location = (-400, 300)

        imgname = Path(ctex.filepath.replace("\\", "/")).name
        imgpath = Path(dir.joinpath(imgname))

        # If the file does not exist, try to get one from the shared folder
        if not imgpath.exists() and keywords["shared_path"] != "":
            imgpath = Path(Path(keywords["shared_path"]).joinpath(imgname))

        if imgpath.exists():
            tex.image = bpy.data.images.load(str(imgpath), check_existing = keywords["reuse_assets"])
            if ctex.sequenced:
                tex.image.source = "SEQUENCE"
                tex.image_user.use_auto_refresh = True
                tex.image_user.use_cyclic = True
        else:
            logging.getLogger("lwo_loader").warning("Texture %s of surface \"%s\" not found", imgname, surfName)

        tex.extension = "REPEAT"
        tex.interpolation = "Linear" if ctex.interpolate else "Closest"
        tree.links.new(tex.outputs[0], bsdf.inputs["Base Color"])

    return mat
