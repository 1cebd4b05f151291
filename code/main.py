# main.py
import argparse
import copy
import logging
import os
import sys

from config import CONFIG, ProphetSettings, REQUESTER_RULES, SettingsError
from simulation.engine import Simulator
from simulation.visualize import plot_delivery_timeline, plot_predictability_matrix

# Configuration du logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


def parse_arguments(argv=None):
    """Parse les arguments de ligne de commande."""
    parser = argparse.ArgumentParser(
        description="Simulation du routage PRoPHET orienté contenu dans un réseau opportuniste"
    )
    parser.add_argument('--seed', type=int, default=CONFIG['scenario']['seed'],
                        help='Graine du générateur aléatoire')
    parser.add_argument('--nodes', type=int, default=CONFIG['scenario']['num_nodes'],
                        help='Nombre de nœuds')
    parser.add_argument('--duration', type=float, default=CONFIG['scenario']['duration'],
                        help='Durée simulée (secondes)')
    parser.add_argument('--beta', type=float, default=CONFIG['prophet']['beta'],
                        help='Facteur de transitivité')
    parser.add_argument('--seconds-in-time-unit', type=float,
                        default=CONFIG['prophet']['seconds_in_time_unit'],
                        help='Secondes par unité de temps de vieillissement')
    parser.add_argument('--requester-rule', type=str, choices=REQUESTER_RULES,
                        default=CONFIG['prophet']['requester_rule'],
                        help='Règle de comparaison des demandeurs')
    parser.add_argument('--outdir', type=str, default=CONFIG['outdir'],
                        help='Dossier de sortie')
    parser.add_argument('--plot', action='store_true', help='Génère les graphiques')
    parser.add_argument('--verbose', action='store_true', help='Active les traces DEBUG')
    return parser.parse_args(argv)


def main(argv=None):
    """Point d'entrée principal du programme."""
    args = parse_arguments(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = copy.deepcopy(CONFIG)
    config['prophet'].update({
        'beta': args.beta,
        'seconds_in_time_unit': args.seconds_in_time_unit,
        'requester_rule': args.requester_rule,
    })
    config['scenario'].update({'seed': args.seed, 'num_nodes': args.nodes, 'duration': args.duration})

    try:
        settings = ProphetSettings.from_config(config['prophet'], config['messages'])
    except SettingsError as e:
        logger.error("Configuration invalide: %s", e)
        return 2

    logger.info("### Simulation PRoPHET: %d nœuds, %.0f s, beta=%.2f, règle=%s ###",
                args.nodes, args.duration, settings.beta, settings.requester_rule)
    simulator = Simulator(settings, config['scenario'], config['messages'])
    simulator.run(progress=True)

    print(simulator.report.summary_table())

    os.makedirs(args.outdir, exist_ok=True)
    events_path = os.path.join(args.outdir, "message_events.csv")
    simulator.report.events_dataframe().to_csv(events_path, index=False)
    logger.info("Événements sauvegardés dans %s", events_path)

    if args.plot:
        routers = [node.router for node in simulator.swarm.nodes]
        plot_delivery_timeline(simulator.report, args.outdir)
        plot_predictability_matrix(routers, args.outdir)
        logger.info("Graphiques sauvegardés dans %s", args.outdir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
