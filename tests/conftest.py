import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

from langident.config.settings import TrainingConfig
from langident.models.training_pipeline import fit

ENGLISH = [
    "the cat is sleeping on the chair",
    "we are going to the beach this weekend",
    "she has a red car and a blue bike",
    "the children play in the park every day",
    "i would like another cup of coffee",
    "they have lived in london for years",
    "this is the best book i have read",
    "the weather is cold and windy today",
    "he works with his father at the shop",
    "please close the window behind you",
    "where are you going this evening",
    "my sister likes to sing in the morning",
    "the train was late again this morning",
    "we should buy some bread and milk",
    "the garden is full of flowers",
    "what time does the film start",
    "he is reading the newspaper in the kitchen",
    "our neighbours have a very friendly dog",
    "the teacher asked a difficult question",
    "thank you for the lovely dinner",
]

FRENCH = [
    "le chat dort sur la chaise",
    "nous allons à la plage ce week-end",
    "elle a une voiture rouge et un vélo bleu",
    "les enfants jouent dans le parc tous les jours",
    "je voudrais une autre tasse de café",
    "ils habitent à paris depuis des années",
    "c'est le meilleur livre que j'ai lu",
    "il fait froid et venteux aujourd'hui",
    "il travaille avec son père au magasin",
    "ferme la fenêtre derrière toi s'il te plaît",
    "où vas-tu ce soir",
    "ma soeur aime chanter le matin",
    "le train était encore en retard ce matin",
    "nous devrions acheter du pain et du lait",
    "le jardin est plein de fleurs",
    "à quelle heure commence le film",
    "il lit le journal dans la cuisine",
    "nos voisins ont un chien très gentil",
    "le professeur a posé une question difficile",
    "merci pour ce délicieux dîner",
]


def toy_config(**overrides) -> TrainingConfig:
    options = {
        "hidden_dim": 16,
        "learning_rate": 0.01,
        "batch_size": 8,
        "max_epochs": 100,
    }
    options.update(overrides)
    return TrainingConfig(**options)


@pytest.fixture(scope="session")
def toy_corpus() -> pd.DataFrame:
    rows = []
    for english, french in zip(ENGLISH, FRENCH):
        rows.append({"text": english, "language": "en"})
        rows.append({"text": french, "language": "fr"})
    return pd.DataFrame(rows)


@pytest.fixture(scope="session")
def trained_model(toy_corpus):
    return fit(toy_corpus, toy_config())
