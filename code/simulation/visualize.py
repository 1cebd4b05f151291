# simulation/visualize.py
import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np


def plot_delivery_timeline(report, outdir):
    """
    Trace l'évolution cumulée des créations, relais et livraisons.

    Args:
        report (MessageStatsReport): rapport de la simulation
        outdir (str): dossier de sortie

    Returns:
        str: chemin de l'image générée, ou None si aucun événement
    """
    df = report.events_dataframe()
    if df.empty:
        return None

    plt.figure(figsize=(10, 6))
    for event, style in (('created', 'b-'), ('relayed', 'g-'), ('delivered', 'r-')):
        sub = df[df['event'] == event].sort_values('time')
        if not sub.empty:
            plt.plot(sub['time'], np.arange(1, len(sub) + 1), style, label=event)
    plt.xlabel('Temps (s)')
    plt.ylabel("Nombre cumulé d'événements")
    plt.title('Évolution des messages dans le réseau')
    plt.grid(True)
    plt.legend()

    os.makedirs(outdir, exist_ok=True)
    path = os.path.join(outdir, "delivery_timeline.png")
    plt.savefig(path)
    plt.close()
    return path


def predictability_matrix(routers):
    """
    Construit la matrice P(i,j) à partir des tables exportées des routeurs.

    Args:
        routers (list): routeurs indexés par ID de nœud

    Returns:
        np.ndarray: matrice carrée des probabilités de livraison
    """
    n = len(routers)
    matrix = np.zeros((n, n))
    for i, router in enumerate(routers):
        for peer, value in router.export_snapshot().items():
            matrix[i, peer] = value
    return matrix


def plot_predictability_matrix(routers, outdir):
    """Trace la matrice finale des probabilités de livraison."""
    plt.figure(figsize=(10, 8))
    plt.imshow(predictability_matrix(routers), cmap='viridis', interpolation='none')
    plt.colorbar(label='Probabilité')
    plt.xlabel('Nœud destination')
    plt.ylabel('Nœud source')
    plt.title('Matrice de probabilité finale PRoPHET')

    os.makedirs(outdir, exist_ok=True)
    path = os.path.join(outdir, "prophet_probability_matrix.png")
    plt.savefig(path)
    plt.close()
    return path
