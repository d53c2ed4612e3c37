import argparse
import logging

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns

from robust_pca import (
    PCA,
    PCAConfig,
    RobustPCA,
    RPCAConfig,
    LowRankSparseDataGenerator,
)
from robust_pca.misc import relative_error, max_error, support_overlap


def recovery_test(n, m, rank,
                  num_repetitions=5,
                  sparsity_values=None, # Fraction of corrupted entries
                  outlier_magnitude=50.0,
                  sigma=0.0, # dense noise standard deviation
                  max_iterations=1000,
                  verbose=False):
    '''
    Runs repeated low-rank recovery experiments for robust PCA and 
    plain PCA (truncated to the true rank) at different corruption levels. 
    '''
    if sparsity_values is None:
        sparsity_values = np.linspace(0.0, 0.2, 5)

    results = []
    for sparsity in sparsity_values:
        for rep in range(num_repetitions):
            seed = int(sparsity * 10000) + rep
            data_gen = LowRankSparseDataGenerator(
                n, m, d=rank, sparsity=sparsity,
                outlier_magnitude=outlier_magnitude, seed=seed, sigma=sigma)
            X, L0, S0 = data_gen.generate_sample()

            # Robust PCA
            config = RPCAConfig.from_shape(X.shape, max_iterations=max_iterations)
            rpca = RobustPCA(config).fit(X)
            L_hat = rpca.L()

            # PCA baseline truncated to the true rank
            pca = PCA(PCAConfig(n_components=1.0)).fit(X)
            L_pca = pca.components()[:, :rank] @ pca.basis()[:, :rank].T + pca.mean()

            results.append({
                'method': 'robust_pca',
                'error': relative_error(L_hat, L0),
                'max_error': max_error(L_hat, L0),
                'support_overlap': support_overlap(rpca.S(), S0),
                'n_iter': rpca.n_iter_,
                'converged': rpca.converged_,
                'repetition': rep,
                'seed': seed,
                'sparsity': sparsity,
            })
            results.append({
                'method': 'pca',
                'error': relative_error(L_pca, L0),
                'max_error': max_error(L_pca, L0),
                'support_overlap': np.nan,
                'n_iter': np.nan,
                'converged': True,
                'repetition': rep,
                'seed': seed,
                'sparsity': sparsity,
            })

            if verbose:
                print(f'Finished sparsity={sparsity:.3f}, rep={rep}')

    return pd.DataFrame(results)


def plot_error_frobenius(results, title=None, savepath=None):
    fig, ax = plt.subplots(figsize=(6, 4))
    sns.lineplot(data=results, x='sparsity', y='error', hue='method', marker='o', ax=ax)
    ax.set_yscale('log')
    ax.set_xlabel('Fraction of corrupted entries')
    ax.set_ylabel(r'$\|\hat L - L_0\|_F / \|L_0\|_F$')
    if title:
        ax.set_title(title)
    fig.tight_layout()
    if savepath:
        fig.savefig(savepath, dpi=150)
    else:
        plt.show()


def main():
    parser = argparse.ArgumentParser(description='Low-rank recovery under sparse corruption.')
    parser.add_argument('--n', type=int, default=50)
    parser.add_argument('--m', type=int, default=50)
    parser.add_argument('--rank', type=int, default=1)
    parser.add_argument('--repetitions', type=int, default=3)
    parser.add_argument('--csv', default=None, help='Write the results table here.')
    parser.add_argument('--plot', default=None, help='Save the error plot here instead of showing it.')
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    results = recovery_test(args.n, args.m, args.rank,
                            num_repetitions=args.repetitions,
                            verbose=args.verbose)
    print(results.groupby(['method', 'sparsity'])[['error', 'support_overlap', 'n_iter']].mean())

    if args.csv:
        results.to_csv(args.csv, index=False)
    plot_error_frobenius(results, title='Robust PCA vs PCA', savepath=args.plot)


if __name__ == '__main__':
    main()
