class Magnifier:
    """Integer upsampling of the LIC raster relative to the input lattice."""

    def __init__(self, factor: int = 1):
        self.factor = 1
        self.setFactor(factor)

    def setFactor(self, factor: int) -> None:
        self.factor = max(1, int(factor))

    def getFactor(self) -> int:
        return self.factor

    def magnifiedSize(self, width: int, height: int) -> tuple:
        return (width * self.factor, height * self.factor)
