import numpy as np
import numexpr as ne
from .StructuredGrid2D import StructuredGrid2D


class AnalyticalFlowCreator:
    def __init__(self, grid_size, domainBoundaryMin=(-2.0, -2.0), domainBoundaryMax=(2.0, 2.0), parameters=None, warp=0.0):
        """
        Initialize the analytical flow creator.

        :param grid_size: Tuple, the size of the grid on which to evaluate the flow.(Xdim,Ydim)
        :param domainBoundaryMin: Tuple, (xmin, ymin) of the domain.
        :param domainBoundaryMax: Tuple, (xmax, ymax) of the domain.
        :param parameters: Dictionary, additional parameters to be used in the expression.
        :param warp: Float, amplitude of a sinusoidal node displacement (relative to the domain size)
                     producing a curvilinear grid; 0 keeps the lattice uniform.
        """
        self.Xdim = grid_size[0]
        self.Ydim = grid_size[1]
        self.parameters = parameters if parameters is not None else {}
        self.domainBoundaryMin = domainBoundaryMin
        self.domainBoundaryMax = domainBoundaryMax
        self.warp = warp
        self.expression_x = None
        self.expression_y = None
        self.x, self.y = self._createLattice()

    def _createLattice(self):
        x, y = np.meshgrid(np.linspace(self.domainBoundaryMin[0], self.domainBoundaryMax[0], self.Xdim),
                           np.linspace(self.domainBoundaryMin[1], self.domainBoundaryMax[1], self.Ydim))
        if self.warp != 0.0:
            # boundary nodes stay put because sin vanishes at both ends of [0, pi]
            s, t = np.meshgrid(np.linspace(0.0, np.pi, self.Xdim), np.linspace(0.0, np.pi, self.Ydim))
            width = self.domainBoundaryMax[0] - self.domainBoundaryMin[0]
            height = self.domainBoundaryMax[1] - self.domainBoundaryMin[1]
            bump = np.sin(s) * np.sin(t)
            x = x + self.warp * width * bump * np.sin(2.0 * t) / np.pi
            y = y + self.warp * height * bump * np.sin(2.0 * s) / np.pi
        return x, y

    def setExpression(self, expression_x, expression_y):
        self.expression_x = expression_x
        self.expression_y = expression_y

    def create_flow_field(self) -> StructuredGrid2D:
        """
        Evaluate the expressions at every grid node.

        :return: StructuredGrid2D carrying the flow as point vectors.
        """
        if self.expression_x is None or self.expression_y is None:
            raise ValueError("Call setExpression before create_flow_field")
        local_dict = {'x': self.x, 'y': self.y}
        local_dict.update(self.parameters)
        data = np.zeros((self.Ydim, self.Xdim, 2), dtype=np.float32)
        data[:, :, 0] = ne.evaluate(self.expression_x, local_dict=local_dict)
        data[:, :, 1] = ne.evaluate(self.expression_y, local_dict=local_dict)
        points = np.stack([self.x, self.y], axis=-1)
        return StructuredGrid2D(points, data)

    def update_parameters(self, new_parameters):
        """
        Update the parameters used in the mathematical expressions.

        :param new_parameters: Dictionary, the new parameters to be updated.
        """
        self.parameters.update(new_parameters)


def constant_rotation(grid_size, domainBoundaryMin=(-2.0, -2.0), domainBoundaryMax=(2.0, 2.0), scale=1.0, warp=0.0):
    """
    Create a constant rotation flow field.

    :param scale: Float, the scale of the rotation.
    :return: StructuredGrid2D with the rotation on its points.
    """
    flow_creator = AnalyticalFlowCreator(grid_size=grid_size, domainBoundaryMin=domainBoundaryMin,
                                         domainBoundaryMax=domainBoundaryMax, warp=warp)
    flow_creator.setExpression('-y', 'x')
    grid = flow_creator.create_flow_field()
    if scale != 1.0:
        grid.vectors *= scale
    return grid


def uniform_flow(grid_size, direction=(1.0, 0.0), domainBoundaryMin=(-2.0, -2.0), domainBoundaryMax=(2.0, 2.0)):
    flow_creator = AnalyticalFlowCreator(grid_size=grid_size, domainBoundaryMin=domainBoundaryMin,
                                         domainBoundaryMax=domainBoundaryMax,
                                         parameters={'u': float(direction[0]), 'v': float(direction[1])})
    # numexpr needs an array expression to broadcast the constants over the lattice
    flow_creator.setExpression('u + 0*x', 'v + 0*y')
    return flow_creator.create_flow_field()
