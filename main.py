import argparse
import logging
import sys
import numpy as np
from PIL import Image
from LicUtils.config import load_config
from LicUtils.loggingSetting import initLoggingSetting
from LicUtils.AnalyticalFlowCreator import AnalyticalFlowCreator
from LicUtils.LicRenderer import LicRenderingSteady
from LicUtils.StructuredGridLIC2D import StructuredGridLIC2D


# Function to parse command line arguments and update config
def argParseAndPrepareConfig(argv=None) -> dict:
    parser = argparse.ArgumentParser(description="GPU line integral convolution of an analytical 2D flow")
    parser.add_argument("--config", type=str, default=None, help="Path to the yaml config file")
    parser.add_argument("--steps", type=int, help="Integration steps in each direction")
    parser.add_argument("--step_size", type=float, help="Step length in normalized grid space")
    parser.add_argument("--magnification", type=int, help="Output upsampling factor")
    parser.add_argument("--seed", type=int, help="Seed of the generated noise")
    parser.add_argument("--noise_image", type=str, help="Image file used as noise instead of generated noise")
    parser.add_argument("--expression_x", type=str, help="numexpr expression of the x component")
    parser.add_argument("--expression_y", type=str, help="numexpr expression of the y component")
    parser.add_argument("--output", type=str, help="Output folder")
    parser.add_argument("--name", type=str, help="Output file name")
    parser.add_argument("--progress", action='store_true', help="Show a progress bar over the GPU passes")

    args = parser.parse_args(argv)
    cfg = load_config(args.config)
    if args.steps is not None:
        cfg['lic']['steps'] = args.steps
    if args.step_size is not None:
        cfg['lic']['step_size'] = args.step_size
    if args.magnification is not None:
        cfg['lic']['magnification'] = args.magnification
    if args.seed is not None:
        cfg['noise']['seed'] = args.seed
    if args.noise_image is not None:
        cfg['noise']['image'] = args.noise_image
    if args.expression_x is not None:
        cfg['flow']['expression_x'] = args.expression_x
    if args.expression_y is not None:
        cfg['flow']['expression_y'] = args.expression_y
    if args.output is not None:
        cfg['output']['folder'] = args.output
    if args.name is not None:
        cfg['output']['name'] = args.name
    if args.progress:
        cfg['lic']['show_progress'] = True
    return cfg


def main(argv=None) -> int:
    cfg = argParseAndPrepareConfig(argv)
    initLoggingSetting(cfg['logging']['level'])
    logger = logging.getLogger("LicUtils.main")

    flowCfg = cfg['flow']
    creator = AnalyticalFlowCreator(flowCfg['grid_size'], flowCfg['domain_min'], flowCfg['domain_max'],
                                    warp=flowCfg['warp'])
    creator.setExpression(flowCfg['expression_x'], flowCfg['expression_y'])
    grid = creator.create_flow_field()

    noise = None
    if cfg['noise']['image']:
        noise = np.asarray(Image.open(cfg['noise']['image']).convert('L'), dtype=np.float32) / 255.0
        noise = np.flipud(noise)

    licCfg = cfg['lic']
    lic = StructuredGridLIC2D(steps=licCfg['steps'], stepSize=licCfg['step_size'],
                              magnification=licCfg['magnification'], noiseSeed=cfg['noise']['seed'],
                              showProgress=licCfg['show_progress'], contextOptions=cfg['context'])
    logger.info(lic.printSelf())
    img = LicRenderingSteady(grid, lic, saveFolder=cfg['output']['folder'], saveName=cfg['output']['name'], noise=noise)
    lic.releaseGraphicsResources()
    return 0 if img is not None else 1


if __name__ == "__main__":
    sys.exit(main())
