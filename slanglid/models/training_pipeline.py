"""
Training pipeline and command line tools for the chat language detector.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import pandas as pd
import typer
from rich import print as rprint
from rich.logging import RichHandler
from sklearn.model_selection import train_test_split

from slanglid.config.settings import (
    DEFAULT_MODEL_PATH,
    EVAL_CASES,
    SAMPLE_DATA,
    TARGET_LANGUAGES,
    TrainingConfig,
)
from slanglid.eval.metrics import compute_confusion, evaluate_classifier, evaluate_detector
from slanglid.eval.reporting import save_confusion_plot, save_metrics_json
from slanglid.features.normalizer import augment_text, normalize_text
from slanglid.models.inference import LanguageDetector
from slanglid.models.model_io import ModelData, save_model
from slanglid.models.trainers import InMemoryTrainer, StreamingTrainer, Trainer

logger = logging.getLogger(__name__)

app = typer.Typer(help="Train and evaluate the chat language detector.")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def load_dataset(
    csv_path: Path,
    languages: Optional[Iterable[str]] = None,
) -> pd.DataFrame:
    """
    Load a CSV file containing `text` and `language` columns.
    """
    df = pd.read_csv(csv_path)
    required_cols = {"text", "language"}
    if not required_cols.issubset(df.columns):
        raise ValueError(f"Dataset must include columns: {required_cols}")

    df = df.dropna(subset=["text", "language"])
    if languages:
        df = df[df["language"].isin(list(languages))]

    if df.empty:
        raise ValueError("Dataset is empty after filtering; check language list.")
    return df


def limit_per_language(df: pd.DataFrame, limit: Optional[int], seed: int) -> pd.DataFrame:
    if not limit:
        return df
    shuffled = df.sample(frac=1.0, random_state=seed)
    return shuffled.groupby("language", sort=False).head(limit)


def _compute_test_size(df: pd.DataFrame, config: TrainingConfig) -> float:
    """
    Ensure the test split is large enough to contain at least one sample per class.
    """
    n_samples = len(df)
    n_classes = df["language"].nunique()
    min_fraction = n_classes / n_samples
    return max(config.test_size, min_fraction + 0.01)


def prepare_datasets(
    df: pd.DataFrame,
    config: TrainingConfig,
) -> Tuple[List[str], List[str], List[str], List[str]]:
    """
    Split, normalize and augment a dataset.

    Only the training portion is augmented; texts that normalize below
    ``config.min_text_length`` are dropped from both portions.
    """
    train_df, test_df = train_test_split(
        df,
        test_size=_compute_test_size(df, config),
        random_state=config.random_state,
        stratify=df["language"],
    )

    train_texts: List[str] = []
    train_labels: List[str] = []
    for text, language in zip(train_df["text"], train_df["language"]):
        normalized = normalize_text(text)
        if len(normalized) < config.min_text_length:
            continue
        for variation in augment_text(normalized, language):
            train_texts.append(variation)
            train_labels.append(language)

    test_texts: List[str] = []
    test_labels: List[str] = []
    for text, language in zip(test_df["text"], test_df["language"]):
        normalized = normalize_text(text)
        if len(normalized) >= config.min_text_length:
            test_texts.append(normalized)
            test_labels.append(language)

    logger.info("Training samples: %d", len(train_texts))
    logger.info("Test samples: %d", len(test_texts))
    return train_texts, train_labels, test_texts, test_labels


def build_trainer(config: TrainingConfig, show_progress: bool = False) -> Trainer:
    if config.streaming:
        return StreamingTrainer(
            min_n=config.min_n,
            max_n=config.max_n,
            max_features=config.max_features,
            batch_size=config.batch_size,
            show_progress=show_progress,
        )
    return InMemoryTrainer(
        min_n=config.min_n, max_n=config.max_n, max_features=config.max_features
    )


def train_and_eval(
    df: pd.DataFrame,
    config: TrainingConfig,
    show_progress: bool = False,
) -> tuple[ModelData, dict, dict]:
    """
    Train the vectorizer + classifier and return the model with its metrics.
    """
    df = limit_per_language(df, config.max_samples_per_language, config.random_state)
    train_texts, train_labels, test_texts, test_labels = prepare_datasets(df, config)
    if not train_texts:
        raise ValueError("No training texts left after normalization.")

    trained = build_trainer(config, show_progress=show_progress).train(
        train_texts, train_labels
    )
    metrics, y_pred = evaluate_classifier(
        trained.vectorizer, trained.classifier, test_texts, test_labels, k=config.top_k
    )
    labels = trained.classifier.classes
    conf = compute_confusion(test_labels, y_pred, labels=labels)

    model = ModelData.from_trained(
        trained,
        config={
            "languages": labels,
            "minN": config.min_n,
            "maxN": config.max_n,
            "maxFeatures": config.max_features,
            "streaming": bool(config.streaming),
        },
        metrics={
            "accuracy": metrics["summary"]["accuracy"],
            "topK": metrics["top_k"],
        },
        training_samples=len(train_texts),
        test_samples=len(test_texts),
    )
    return model, metrics, {"confusion": conf, "labels": labels}


def _persist_evaluation_artifacts(
    output_path: Path,
    metrics: dict,
    confusion_payload: dict,
) -> Tuple[Path, Path]:
    metrics_path = output_path.with_suffix(".metrics.json")
    conf_path = output_path.with_suffix(".confusion.png")

    save_metrics_json(metrics_path, metrics)
    save_confusion_plot(
        confusion_payload["confusion"],
        labels=confusion_payload["labels"],
        path=conf_path,
    )
    return metrics_path, conf_path


def _run_training(
    dataset_path: Path,
    output_path: Path,
    languages: Optional[List[str]],
    streaming: bool,
    batch_size: Optional[int],
    max_features: Optional[int],
) -> None:
    config = TrainingConfig()
    config.streaming = streaming
    if batch_size:
        config.batch_size = batch_size
    if max_features:
        config.max_features = max_features

    df = load_dataset(dataset_path, languages)
    model, metrics, confusion = train_and_eval(df, config, show_progress=True)
    save_model(model, output_path)
    metrics_path, conf_path = _persist_evaluation_artifacts(output_path, metrics, confusion)
    rprint(f"[bold green]Saved model to {output_path}")
    rprint(f"[cyan]Metrics JSON → {metrics_path}")
    rprint(f"[cyan]Confusion matrix → {conf_path}")
    rprint(f"Accuracy: {metrics['summary']['accuracy']:.2%}")
    rprint("Top-k accuracy:", metrics["top_k"])


@app.command()
def sample(
    output_path: Path = typer.Option(
        DEFAULT_MODEL_PATH, help="Where to store the trained model."
    ),
    dataset_path: Path = typer.Option(SAMPLE_DATA, help="CSV dataset to train on."),
    streaming: bool = typer.Option(
        False, "--streaming", "-s", help="Accumulate statistics in bounded batches."
    ),
) -> None:
    """
    Train using the bundled miniature dataset for quick experiments.
    """
    _run_training(dataset_path, output_path, TARGET_LANGUAGES, streaming, None, None)


@app.command()
def train(
    dataset_path: Path = typer.Argument(..., help="CSV with text/language columns."),
    output_path: Path = typer.Option(
        DEFAULT_MODEL_PATH, help="Where to store the trained model (.json or .joblib)."
    ),
    languages: Optional[List[str]] = typer.Option(
        None, help="Subset of language codes to keep."
    ),
    streaming: bool = typer.Option(
        False, "--streaming", "-s", help="Accumulate statistics in bounded batches."
    ),
    batch_size: Optional[int] = typer.Option(
        None, "--batch-size", "-b", help="Texts per streamed batch."
    ),
    max_features: Optional[int] = typer.Option(
        None, "--max-features", help="Vocabulary size limit."
    ),
) -> None:
    """
    Train on an arbitrary labelled dataset.
    """
    _run_training(
        dataset_path,
        output_path,
        languages or TARGET_LANGUAGES,
        streaming,
        batch_size,
        max_features,
    )


def _show_detection(detector: LanguageDetector, text: str) -> None:
    result = detector.detect(text)
    rprint(
        f"[bold]{result.language}[/bold] ({result.confidence:.1%}) "
        f"reliable={result.is_reliable} source={result.to_dict().get('source')}"
    )
    if result.probabilities:
        rprint("  Probabilities:", result.probabilities)


def _interactive(detector: LanguageDetector) -> None:
    rprint("Enter text to detect language (Ctrl+C to exit)")
    while True:
        try:
            text = typer.prompt(">", default="", show_default=False)
        except (EOFError, typer.Abort):
            break
        if text.strip():
            _show_detection(detector, text)


@app.command()
def evaluate(
    dataset_path: Path = typer.Argument(
        EVAL_CASES, help="CSV with text/language columns; defaults to the bundled chat cases."
    ),
    model_path: Path = typer.Option(DEFAULT_MODEL_PATH, help="Trained model file."),
    metrics_path: Optional[Path] = typer.Option(
        None, help="Optionally write the evaluation report as JSON."
    ),
    interactive: bool = typer.Option(
        False, "--interactive", "-i", help="Prompt for more texts after the report."
    ),
) -> None:
    """
    Run the full detector (slang + model) over a labelled dataset.
    """
    detector = LanguageDetector().load_from_file(model_path)
    df = load_dataset(dataset_path)
    report = evaluate_detector(detector, df["text"].tolist(), df["language"].tolist())

    rprint(f"Supported languages: {', '.join(detector.supported_languages)}")
    rprint(
        f"[bold]Accuracy: {report['accuracy']:.2%} "
        f"({report['correct']}/{report['total']})"
    )
    rprint("Sources:", report["sources"])
    for error in report["errors"]:
        rprint(
            f"[red]✗[/red] {error['text']!r}: predicted {error['predicted']} "
            f"({error['confidence']:.1%}), expected {error['expected']}"
        )
    if metrics_path:
        save_metrics_json(metrics_path, report)
        rprint(f"[cyan]Report JSON → {metrics_path}")
    if interactive:
        _interactive(detector)


@app.command()
def detect(
    texts: Optional[List[str]] = typer.Argument(None, help="Texts to classify."),
    model_path: Path = typer.Option(DEFAULT_MODEL_PATH, help="Trained model file."),
) -> None:
    """
    Detect the language of the given texts, or prompt interactively when none are given.
    """
    detector = LanguageDetector().load_from_file(model_path)
    if not texts:
        _interactive(detector)
        return
    for text in texts:
        _show_detection(detector, text)


if __name__ == "__main__":
    app()
