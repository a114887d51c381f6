import math
import os

import pytest

from neuronet.dataset import Dataset
from neuronet.model_data import ModelData, load_model
from neuronet.network import NeuralNetwork
from neuronet.workflow import (
    TrainingConfig,
    WorkflowError,
    evaluate,
    find_csv_files,
    find_models,
    parse_training_config,
    predict,
    run_training,
    save_trained_model,
    select_model,
)


def _identity_network(size, activation="linear"):
    return NeuralNetwork(
        num_inputs=size,
        hidden_layers=[],
        num_outputs=size,
        hidden_weights=[],
        output_weights=[[1.0 if i == j else 0.0 for j in range(size)] for i in range(size)],
        hidden_biases=[],
        output_biases=[0.0] * size,
        hidden_activations=[],
        output_activation=activation,
    )


def _regression_csv(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("a,b,y\n1,2,3\n2,3,5\n3,4,7\n4,5,9\n5,6,11\n")
    return str(path)


def test_parse_training_config_defaults():
    config = parse_training_config(["1", "", "", "", "", "", ""], ["x.csv"])
    assert config.csv_path == "x.csv"
    assert config.hidden_layers == [20, 20]
    assert config.hidden_activations == ["relu", "relu"]
    assert config.output_activation == "linear"
    assert config.epochs == 1000
    assert config.learning_rate == 0.001
    assert config.error_goal == 0.001


def test_parse_training_config_explicit_values():
    config = parse_training_config(
        ["2", "4, 3", "tanh,sigmoid", "sigmoid", "50", "0.5", "0.01"],
        ["a.csv", "b.csv"],
    )
    assert config.csv_path == "b.csv"
    assert config.hidden_layers == [4, 3]
    assert config.hidden_activations == ["tanh", "sigmoid"]
    assert config.output_activation == "sigmoid"
    assert config.epochs == 50
    assert config.learning_rate == 0.5
    assert config.error_goal == 0.01


@pytest.mark.parametrize("choice", ["0", "3", "abc", ""])
def test_parse_training_config_bad_csv_choice(choice):
    with pytest.raises(WorkflowError, match="invalid CSV file selection"):
        parse_training_config([choice, "", "", "", "", "", ""], ["a.csv", "b.csv"])


@pytest.mark.parametrize(
    "index, text, message",
    [
        (1, "20,x", "invalid hidden layers"),
        (4, "ten", "invalid epochs value"),
        (5, "fast", "invalid learning rate"),
        (6, "low", "invalid error goal"),
    ],
)
def test_parse_training_config_bad_values(index, text, message):
    values = ["1", "", "", "", "", "", ""]
    values[index] = text
    with pytest.raises(WorkflowError, match=message):
        parse_training_config(values, ["a.csv"])


def test_run_training_reports_every_epoch(tmp_path):
    config = TrainingConfig(
        csv_path=_regression_csv(tmp_path),
        hidden_layers=[3],
        hidden_activations=["tanh"],
        output_activation="linear",
        epochs=4,
        learning_rate=0.01,
        error_goal=0.0,
    )
    seen = []
    model_data, dataset = run_training(config, lambda n, loss: seen.append((n, loss)))
    assert [n for n, _ in seen] == [1, 2, 3, 4]
    assert all(loss >= 0 for _, loss in seen)
    assert model_data.nn.num_inputs == 2
    assert model_data.nn.hidden_layers == [3]
    assert model_data.target_mins == [3.0]
    assert model_data.target_maxs == [11.0]
    assert len(dataset.train_inputs) == 4
    assert len(dataset.test_inputs) == 1


def test_run_training_missing_file(tmp_path):
    config = TrainingConfig(
        str(tmp_path / "missing.csv"), [2], ["relu"], "linear", 1, 0.1, 0.0
    )
    with pytest.raises(WorkflowError, match="failed to load CSV data"):
        run_training(config, None)


def test_run_training_unknown_activation(tmp_path):
    config = TrainingConfig(
        _regression_csv(tmp_path), [2], ["bogus"], "linear", 1, 0.1, 0.0
    )
    with pytest.raises(WorkflowError):
        run_training(config, None)


def test_evaluate_classification_accuracy():
    model = ModelData(nn=_identity_network(2), input_mins=[0, 0], input_maxs=[1, 1])
    dataset = Dataset(
        train_inputs=[],
        train_targets=[],
        test_inputs=[[1.0, 0.0], [0.0, 1.0], [1.0, 0.0]],
        test_targets=[[1.0, 0.0], [0.0, 1.0], [0.0, 1.0]],
        input_size=2,
        output_size=2,
        input_mins=[0, 0],
        input_maxs=[1, 1],
        class_map={"a": 0, "b": 1},
    )
    assert evaluate(model, dataset) == pytest.approx(2 / 3)


def test_evaluate_regression_counts_nothing():
    model = ModelData(nn=_identity_network(1), input_mins=[0], input_maxs=[1])
    dataset = Dataset([], [], [[0.5], [0.2]], [[0.5], [0.2]], 1, 1, [0], [1])
    assert evaluate(model, dataset) == 0.0


def test_evaluate_empty_test_set_is_nan():
    model = ModelData(nn=_identity_network(1), input_mins=[0], input_maxs=[1])
    dataset = Dataset([], [], [], [], 1, 1, [0], [1], class_map={"a": 0})
    accuracy = evaluate(model, dataset)
    assert str(accuracy) == "nan"
    assert math.isnan(accuracy)


def test_predict_regression_rescales():
    model = ModelData(
        nn=_identity_network(1),
        input_mins=[0.0],
        input_maxs=[10.0],
        target_mins=[2.0],
        target_maxs=[4.0],
    )
    assert predict(model, " 5 ") == pytest.approx(3.0)


def test_predict_classification_returns_name():
    model = ModelData(
        nn=_identity_network(2),
        input_mins=[0.0, 0.0],
        input_maxs=[10.0, 10.0],
        class_map={"a": 0, "b": 1},
    )
    assert predict(model, "0, 10") == "b"
    assert predict(model, "10,0") == "a"


def test_predict_wrong_count():
    model = ModelData(nn=_identity_network(2), input_mins=[0, 0], input_maxs=[1, 1])
    with pytest.raises(WorkflowError, match="expected 2 input values, but got 1"):
        predict(model, "1")


def test_predict_bad_value():
    model = ModelData(nn=_identity_network(2), input_mins=[0, 0], input_maxs=[1, 1])
    with pytest.raises(WorkflowError, match="invalid input value"):
        predict(model, "1,x")


def test_predict_bad_activation():
    network = _identity_network(1, activation="bogus")
    model = ModelData(nn=network, input_mins=[0], input_maxs=[1])
    with pytest.raises(WorkflowError, match="failed to set activation functions"):
        predict(model, "1")


def test_select_model():
    models = ["saved_models/a.json", "saved_models/b.json"]
    assert select_model(models, "2") == "saved_models/b.json"
    with pytest.raises(WorkflowError, match="invalid model selection"):
        select_model(models, "3")
    with pytest.raises(WorkflowError, match="invalid model selection"):
        select_model(models, "one")


def test_find_csv_files_sorted(tmp_path):
    for name in ["b.csv", "a.csv", "notes.txt"]:
        (tmp_path / name).write_text("x")
    found = find_csv_files(str(tmp_path))
    assert found == [str(tmp_path / "a.csv"), str(tmp_path / "b.csv")]


def test_find_models_missing_directory(tmp_path):
    assert find_models(str(tmp_path / "nowhere")) == []


def test_save_and_find_model_round_trip(tmp_path):
    model = ModelData(
        nn=_identity_network(2),
        input_mins=[0.0, 0.0],
        input_maxs=[1.0, 1.0],
        class_map={"a": 0, "b": 1},
    )
    path = save_trained_model(model, "mine", str(tmp_path))
    assert path == os.path.join(str(tmp_path), "mine.json")
    assert find_models(str(tmp_path)) == [path]
    loaded = load_model(path)
    assert loaded.nn.output_weights == model.nn.output_weights
    assert loaded.class_map == model.class_map


def test_save_with_empty_name_skips(tmp_path):
    model = ModelData(nn=_identity_network(1), input_mins=[0], input_maxs=[1])
    assert save_trained_model(model, "", str(tmp_path)) is None
    assert find_models(str(tmp_path)) == []