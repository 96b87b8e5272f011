import logging
import os
import OpenGL.GL as gl
import glm
import OpenGL.error
from .errors import ProgramBuildError

logger = logging.getLogger(__name__)

SHADER_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "shaders")


def shaderPath(fileName: str) -> str:
    return os.path.join(SHADER_DIR, fileName)


# General Shader class for compiling GLSL shaders
class Shader:
    def __init__(self, file_path, shader_type):
        if not os.path.exists(file_path):
            raise ProgramBuildError(f"Shader source not found: {file_path}")
        with open(file_path, 'r') as file:
            source = file.read()
        try:
            self.shader_id = gl.glCreateShader(shader_type)
            gl.glShaderSource(self.shader_id, source)
            gl.glCompileShader(self.shader_id)
            compiled = gl.glGetShaderiv(self.shader_id, gl.GL_COMPILE_STATUS)
        except OpenGL.error.Error as e:
            raise ProgramBuildError(f"OpenGL error while compiling {file_path}: {e}") from e
        if not compiled:
            error = gl.glGetShaderInfoLog(self.shader_id)
            error = error.decode() if isinstance(error, bytes) else str(error)
            logger.error(f'Error compiling {file_path}: {error}')
            gl.glDeleteShader(self.shader_id)
            raise ProgramBuildError(f"Shader compilation error in {os.path.basename(file_path)}")

    def get_id(self):
        return self.shader_id


# Class to link vertex and fragment shaders into a shader program
class ShaderProgram:
    def __init__(self, key_name, vertex_shader_path, fragment_shader_path):
        self.key_name = key_name
        self.vertex_shader_path = vertex_shader_path
        self.fragment_shader_path = fragment_shader_path
        self.program_id = None
        self.activeTextureUnitCounter = 0
        self.uniform_locations = {}
        self.uniform_Flags = {}
        self._compile_and_link()

    def _compile_and_link(self):
        vertex_shader = Shader(self.vertex_shader_path, gl.GL_VERTEX_SHADER)
        try:
            fragment_shader = Shader(self.fragment_shader_path, gl.GL_FRAGMENT_SHADER)
        except ProgramBuildError:
            gl.glDeleteShader(vertex_shader.get_id())
            raise
        try:
            self.program_id = gl.glCreateProgram()
            gl.glAttachShader(self.program_id, vertex_shader.get_id())
            gl.glAttachShader(self.program_id, fragment_shader.get_id())
            gl.glLinkProgram(self.program_id)
            linked = gl.glGetProgramiv(self.program_id, gl.GL_LINK_STATUS)
        except OpenGL.error.Error as e:
            raise ProgramBuildError(f"OpenGL error while linking {self.key_name}: {e}") from e
        finally:
            # linked programs keep their own copy of the binaries
            gl.glDeleteShader(vertex_shader.get_id())
            gl.glDeleteShader(fragment_shader.get_id())

        if not linked:
            error = gl.glGetProgramInfoLog(self.program_id)
            error = error.decode() if isinstance(error, bytes) else str(error)
            logger.error(f'Error linking program {self.program_id}-{self.key_name}: {error}')
            gl.glDeleteProgram(self.program_id)
            self.program_id = None
            raise ProgramBuildError("Program linking error")
        self.uniform_locations, self.uniform_Flags = self._get_uniform_locations()
        logger.info(f'Shader program {self.key_name} created with ID {self.program_id}')
        gl.glUseProgram(0)

    def deleteProgram(self):
        if self.program_id is not None and self.program_id > 0:
            gl.glDeleteProgram(self.program_id)
        self.program_id = None

    def _get_uniform_locations(self):
        uniform_locations = {}
        uniform_flag: dict[str, bool] = {}
        num_uniforms = gl.glGetProgramiv(self.program_id, gl.GL_ACTIVE_UNIFORMS)
        for i in range(num_uniforms):
            name, size, uniform_type = gl.glGetActiveUniform(self.program_id, i)
            name = name.decode("utf-8") if isinstance(name, bytes) else str(name)
            location = gl.glGetUniformLocation(self.program_id, name)
            uniform_locations[name] = (location, size, uniform_type)
            uniform_flag[name] = False
        return uniform_locations, uniform_flag

    def __setUniform(self, name, value):
        if name not in self.uniform_locations.keys():
            # optimized away by the GLSL compiler
            return
        setSuccess = True
        location, size, uniform_type = self.uniform_locations[name]
        if uniform_type == gl.GL_FLOAT:
            gl.glUniform1f(location, float(value))
        elif uniform_type == gl.GL_INT:
            gl.glUniform1i(location, int(value))
        elif uniform_type == gl.GL_FLOAT_VEC2:
            data = glm.value_ptr(value) if isinstance(value, glm.vec2) else value
            gl.glUniform2fv(location, 1, data)
        elif uniform_type == gl.GL_FLOAT_VEC3:
            data = glm.value_ptr(value) if isinstance(value, glm.vec3) else value
            gl.glUniform3fv(location, 1, data)
        elif uniform_type == gl.GL_SAMPLER_2D:
            setSuccess = self.set_sampler_uniform(location, name, value)
        else:
            setSuccess = False
            logger.warning(f"Uniform type {uniform_type} of {name} is not supported.")
        self.uniform_Flags[name] = setSuccess

    def set_sampler_uniform(self, location, name, value) -> bool:
        gl.glActiveTexture(gl.GL_TEXTURE0 + self.activeTextureUnitCounter)
        gl.glBindTexture(gl.GL_TEXTURE_2D, value)
        gl.glUniform1i(location, self.activeTextureUnitCounter)
        self.activeTextureUnitCounter += 1
        return True

    def setUniforms(self, uniforms: dict):
        """Bind the program and set every uniform in ``uniforms``; sampler values are texture ids."""
        self.Use()
        self.activeTextureUnitCounter = 0
        for name, value in uniforms.items():
            self.__setUniform(name, value)
        self.checkUniforms()

    def checkUniforms(self):
        for name, value in self.uniform_Flags.items():
            if not value:
                logger.warning(f"Shader program {self.key_name} 's Uniform {name} has not been set.")

    def Use(self):
        gl.glUseProgram(self.program_id)
